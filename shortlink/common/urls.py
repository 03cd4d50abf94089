"""Building the public short URL returned to clients."""

from typing import Mapping, Optional
from urllib.parse import quote


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    for k, v in headers.items():
        if k.lower() == name and v:
            return v
    return None


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
) -> str:
    """Work out the externally visible base URL of the service.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host (set by a reverse proxy)
    2. Request scheme + Host header
    3. Configured fallback base URL

    Returns:
        Base URL without trailing slash (e.g. https://example.com)
    """
    forwarded_proto = _header(headers, "x-forwarded-proto")
    forwarded_host = _header(headers, "x-forwarded-host")
    if forwarded_proto and forwarded_host:
        return f"{forwarded_proto}://{forwarded_host}"

    host = _header(headers, "host")
    if request_scheme and host:
        return f"{request_scheme}://{host}"

    return fallback_base_url.rstrip("/")


def get_forwarded_path_prefix(headers: Mapping[str, str]) -> str:
    """Path prefix from X-Forwarded-Prefix, normalized to '/prefix' or ''."""
    value = _header(headers, "x-forwarded-prefix")
    if not value:
        return ""
    p = value.strip().strip("/")
    return "/" + p if p else ""


def build_short_url(key: str, base_url: str, path_prefix: str = "") -> str:
    """Join base URL, optional nested path and key.

    >>> build_short_url("loyw3v28", "https://s.example.com/", "/go")
    'https://s.example.com/go/loyw3v28'
    """
    base = base_url.rstrip("/")
    prefix = path_prefix.strip("/")

    if prefix:
        return f"{base}/{prefix}/{key}"
    return f"{base}/{key}"


def join_path_prefix(*parts: str) -> str:
    """Join path prefix fragments into '/a/b', skipping empty ones."""
    segments = [p.strip("/") for p in parts if p and p.strip("/")]
    return "/" + "/".join(segments) if segments else ""


def location_header_value(uri: str) -> str:
    """Make ``uri`` safe to send as a Location header.

    Printable ASCII, including space and characters such as ``{}|``, is
    kept verbatim. Control and non-ASCII characters cannot go in a header
    and are percent-encoded as UTF-8.

    >>> location_header_value("https://example.com/{a}|b c")
    'https://example.com/{a}|b c'
    >>> location_header_value("https://example.com/caf\\u00e9")
    'https://example.com/caf%C3%A9'
    """
    return "".join(
        ch if " " <= ch <= "~" else quote(ch, safe="")
        for ch in uri
    )
