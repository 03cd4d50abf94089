"""Data models for short links."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Link:
    """A persisted key to URI mapping."""

    key: str
    uri: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"key": self.key, "uri": self.uri}
