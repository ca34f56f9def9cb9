"""
whisperjob.transcript.timestamps - Timestamp parsing and conversion.

Handles the engine's HH:MM:SS.mmm timestamps and their SubRip and LRC
renderings.
"""

from __future__ import annotations

import re

from whisperjob.exceptions import FormatError

TIMESTAMP_PATTERN = r"\d\d:[0-5]\d:[0-5]\d\.\d\d\d"
SRT_TIMESTAMP_PATTERN = r"\d\d:[0-5]\d:[0-5]\d,\d\d\d"

_TIMESTAMP_RE = re.compile(rf"^{TIMESTAMP_PATTERN}$")


def is_timestamp(value: str) -> bool:
    """Check whether a string is a valid HH:MM:SS.mmm timestamp."""
    return bool(_TIMESTAMP_RE.match(value))


def split_timestamp(value: str) -> tuple[int, int, int, str]:
    """Split a timestamp into hours, minutes, seconds and the millisecond digits.

    Raises:
        FormatError: If the value is not a valid HH:MM:SS.mmm timestamp
    """
    if not is_timestamp(value):
        raise FormatError(f"Invalid timestamp: {value!r}")
    clock, millis = value.split(".")
    hh, mm, ss = clock.split(":")
    return int(hh), int(mm), int(ss), millis


def to_srt_timestamp(value: str) -> str:
    """Render a timestamp with SubRip's comma decimal separator."""
    return value.replace(".", ",")


def from_srt_timestamp(value: str) -> str:
    """Convert a SubRip timestamp back to the engine's period separator."""
    return value.replace(",", ".")


def to_lrc_timestamp(value: str) -> str:
    """Convert HH:MM:SS.mmm to LRC's MM:SS.CC.

    Hours fold into minutes, and minutes wrap at 100 because LRC only has
    two minute digits. Centiseconds are the first two millisecond digits
    (truncated, not rounded).

    Args:
        value: Engine timestamp

    Returns:
        LRC timestamp without brackets
    """
    hh, mm, ss, millis = split_timestamp(value)
    minutes = (hh * 60 + mm) % 100
    return f"{minutes:02d}:{ss:02d}.{millis[:2]}"
