"""
whisperjob.transcript.formats - Segment list <-> text format conversion.

Renders transcript segments as WebVTT (header + cues), SubRip (indexed cues
with comma decimals), LRC (lyric timestamps) and plain text, and parses
WebVTT and SubRip back into segments.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from whisperjob.exceptions import FormatError
from whisperjob.transcript.models import OutputFormat, TranscriptSegment
from whisperjob.transcript.timestamps import (
    SRT_TIMESTAMP_PATTERN,
    TIMESTAMP_PATTERN,
    from_srt_timestamp,
    to_lrc_timestamp,
    to_srt_timestamp,
)

VTT_HEADER = "WEBVTT"

_VTT_CUE_RE = re.compile(rf"^({TIMESTAMP_PATTERN}) --> ({TIMESTAMP_PATTERN})$")
_SRT_CUE_RE = re.compile(rf"^({SRT_TIMESTAMP_PATTERN}) --> ({SRT_TIMESTAMP_PATTERN})$")


def to_vtt_body(segments: Sequence[TranscriptSegment]) -> str:
    """Render cues without the WEBVTT header."""
    return "\n".join(f"{seg.start} --> {seg.end}\n{seg.content}\n" for seg in segments)


def to_vtt(segments: Sequence[TranscriptSegment]) -> str:
    """Render segments as a WebVTT document."""
    return f"{VTT_HEADER}\n\n{to_vtt_body(segments)}"


def to_srt(segments: Sequence[TranscriptSegment]) -> str:
    """Render segments as SubRip with 1-based cue indexes."""
    return "\n".join(
        f"{index}\n{to_srt_timestamp(seg.start)} --> {to_srt_timestamp(seg.end)}\n{seg.content}\n"
        for index, seg in enumerate(segments, start=1)
    )


def to_lrc(segments: Sequence[TranscriptSegment]) -> str:
    """Render segments as LRC lyric lines keyed on each segment's start."""
    lines = []
    for seg in segments:
        text = seg.content.replace("\n", " ")
        lines.append(f"[{to_lrc_timestamp(seg.start)}]{text}\n")
    return "".join(lines)


def to_text(segments: Sequence[TranscriptSegment]) -> str:
    """Render segment contents one per line, without timing."""
    return "".join(f"{seg.content}\n" for seg in segments)


class _CueCollector:
    """Accumulates cue lines into segments with globally sequential ids."""

    def __init__(self) -> None:
        self.segments: list[TranscriptSegment] = []
        self._start = ""
        self._end = ""
        self._lines: list[str] = []

    def open(self, start: str, end: str) -> None:
        self.close()
        self._start = start
        self._end = end

    @property
    def is_open(self) -> bool:
        return bool(self._start)

    def add_line(self, line: str) -> None:
        self._lines.append(line)

    def close(self) -> None:
        content = "\n".join(self._lines).strip()
        if self._start and self._end and content:
            self.segments.append(
                TranscriptSegment(
                    start=self._start,
                    end=self._end,
                    content=content,
                    id=len(self.segments),
                )
            )
        self._start = ""
        self._end = ""
        self._lines = []


def from_vtt(raw: str) -> list[TranscriptSegment]:
    """Parse a WebVTT document into segments.

    Every timestamp line starts a new cue; the non-empty lines after it form
    the cue's content until the next timestamp line. Cues without content
    are dropped. Text before the first timestamp line is ignored.

    Args:
        raw: WebVTT text, with or without the WEBVTT header

    Returns:
        Segments with ids 0..n-1 across the whole document

    Raises:
        FormatError: If the input is not a string
    """
    if not isinstance(raw, str):
        raise FormatError("WebVTT input must be a string")

    lines = raw.strip().split("\n")
    if lines and lines[0].startswith(VTT_HEADER):
        lines = lines[1:]

    collector = _CueCollector()
    for line in lines:
        line = line.strip()
        if not line:
            continue
        match = _VTT_CUE_RE.match(line)
        if match:
            collector.open(match.group(1), match.group(2))
        elif collector.is_open:
            collector.add_line(line)
    collector.close()
    return collector.segments


def from_srt(raw: str) -> list[TranscriptSegment]:
    """Parse a SubRip document into segments.

    A numeric line directly followed by a timestamp line is treated as the
    cue index and skipped; timestamps are converted back to period decimals.

    Raises:
        FormatError: If the input is not a string
    """
    if not isinstance(raw, str):
        raise FormatError("SubRip input must be a string")

    lines = [line.strip() for line in raw.strip().split("\n")]
    lines = [line for line in lines if line]

    collector = _CueCollector()
    for i, line in enumerate(lines):
        match = _SRT_CUE_RE.match(line)
        if match:
            collector.open(from_srt_timestamp(match.group(1)), from_srt_timestamp(match.group(2)))
            continue
        is_index = line.isdigit() and i + 1 < len(lines) and _SRT_CUE_RE.match(lines[i + 1])
        if is_index:
            continue
        if collector.is_open:
            collector.add_line(line)
    collector.close()
    return collector.segments


_RENDERERS = {
    OutputFormat.VTT: to_vtt,
    OutputFormat.SRT: to_srt,
    OutputFormat.LRC: to_lrc,
    OutputFormat.TXT: to_text,
}

_PARSERS = {
    OutputFormat.VTT: from_vtt,
    OutputFormat.SRT: from_srt,
}


def render(segments: Sequence[TranscriptSegment], fmt: OutputFormat | str) -> str:
    """Render segments in the given output format."""
    return _RENDERERS[OutputFormat(fmt)](segments)


def parse(raw: str, fmt: OutputFormat | str) -> list[TranscriptSegment]:
    """Parse text in the given format back into segments.

    Raises:
        FormatError: If the format has no parser (LRC and plain text are write-only)
    """
    fmt = OutputFormat(fmt)
    if fmt not in _PARSERS:
        raise FormatError(f"Cannot parse {fmt.value} input")
    return _PARSERS[fmt](raw)


def format_from_suffix(suffix: str) -> OutputFormat:
    """Map a file suffix like '.srt' to its OutputFormat.

    Raises:
        FormatError: If the suffix is not a known transcript format
    """
    try:
        return OutputFormat(suffix.lower().lstrip("."))
    except ValueError as e:
        raise FormatError(f"Unknown transcript format: {suffix}") from e
