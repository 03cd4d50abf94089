"""Time-based key generation for short links."""

import string
import time
from typing import Callable, Optional

from .errors import ClockUnavailable


DIGITS = string.digits + string.ascii_lowercase  # 0-9a-z

MIN_RADIX = 2
MAX_RADIX = len(DIGITS)


def clamp_radix(radix: int) -> int:
    """Clamp a radix to the supported range [2, 36]."""
    return max(MIN_RADIX, min(MAX_RADIX, radix))


def format_radix(value: int, radix: int = MAX_RADIX) -> str:
    """Encode a non-negative integer in the given radix.

    Digits are taken from ``0-9a-z``, most significant first, without
    padding. Zero encodes as ``"0"``.

    Args:
        value: Integer to encode (must be >= 0)
        radix: Base to encode in (clamped to [2, 36])

    Returns:
        Encoded string
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value: {value}")

    radix = clamp_radix(radix)
    result = []

    while True:
        value, remainder = divmod(value, radix)
        result.append(DIGITS[remainder])
        if value == 0:
            break

    return ''.join(reversed(result))


def parse_radix(text: str, radix: int = MAX_RADIX) -> int:
    """Decode a string produced by :func:`format_radix`."""
    return int(text, clamp_radix(radix))


def wall_clock_millis() -> int:
    """Milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


class KeyGenerator:
    """Generate short keys from the current time.

    The key is the current millisecond timestamp written in ``radix``.
    Keys are not checked for uniqueness here: two calls within the same
    millisecond return the same key, and the link store is responsible
    for rejecting the duplicate.
    """

    def __init__(
        self,
        radix: int = MAX_RADIX,
        clock: Optional[Callable[[], int]] = None,
    ):
        """Initialize key generator.

        Args:
            radix: Radix for the encoded timestamp (clamped to [2, 36])
            clock: Callable returning milliseconds since the epoch
        """
        self.radix = clamp_radix(radix)
        self._clock = clock or wall_clock_millis

    def current_millis(self) -> int:
        """Read the clock.

        Raises:
            ClockUnavailable: If the clock cannot be read or is before the epoch
        """
        try:
            millis = self._clock()
        except OSError as e:
            raise ClockUnavailable(f"Cannot read system clock: {e}") from e

        if millis < 0:
            raise ClockUnavailable(f"System clock is before the epoch: {millis}ms")

        return millis

    def generate(self) -> str:
        """Generate a key for a new link."""
        return format_radix(self.current_millis(), self.radix)
