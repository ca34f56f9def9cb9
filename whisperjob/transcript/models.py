"""
whisperjob.transcript.models - Transcript segment and output format types.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any


class OutputFormat(str, Enum):
    """Text formats the engine can write and the converters can render."""

    TXT = "txt"
    VTT = "vtt"
    SRT = "srt"
    LRC = "lrc"


# Formats the engine itself writes next to its input (-otxt, -osrt, -ovtt).
ENGINE_OUTPUT_FORMATS = (OutputFormat.TXT, OutputFormat.SRT, OutputFormat.VTT)


@dataclass(frozen=True, slots=True)
class TranscriptSegment:
    """One timed line of transcript text.

    Timestamps are kept as HH:MM:SS.mmm strings, exactly as the engine
    prints them, so they compare correctly both lexically and in time.
    """

    start: str
    end: str
    content: str
    id: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def renumber(segments: Iterable[TranscriptSegment], start: int = 0) -> list[TranscriptSegment]:
    """Return segments with contiguous ids starting at ``start``."""
    return [replace(seg, id=i) for i, seg in enumerate(segments, start=start)]
