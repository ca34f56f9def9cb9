"""
whisperjob.engine.parser - Parse the engine's streamed console output.

whisper.cpp prints one line per segment on stdout:

    [00:00:01.000 --> 00:00:02.000]  hello there

and announces auto-detected languages on stderr:

    whisper_full_with_state: auto-detected language: en (p = 0.970215)
"""

from __future__ import annotations

import re

from whisperjob.transcript.models import TranscriptSegment
from whisperjob.transcript.timestamps import TIMESTAMP_PATTERN

_SEGMENT_LINE_RE = re.compile(rf"^\[({TIMESTAMP_PATTERN}) --> ({TIMESTAMP_PATTERN})\](.*)$")
_LANGUAGE_RE = re.compile(r"language: (\S+?) \(p = ")
_LINE_BREAK_RE = re.compile(r"\r\n|[\r\n]")


def parse_output_chunk(chunk: str) -> list[TranscriptSegment]:
    """Parse one chunk of engine stdout into segments.

    Lines that are not segment lines are dropped. Ids count from 0 within
    the chunk; the parser keeps no state between chunks.

    Args:
        chunk: Raw stdout text

    Returns:
        Segments in output order, possibly empty
    """
    segments: list[TranscriptSegment] = []
    for line in _LINE_BREAK_RE.split(chunk.strip()):
        line = line.strip()
        if not line:
            continue
        match = _SEGMENT_LINE_RE.match(line)
        if match:
            segments.append(
                TranscriptSegment(
                    start=match.group(1),
                    end=match.group(2),
                    content=match.group(3).strip(),
                    id=len(segments),
                )
            )
    return segments


def detect_language(text: str) -> str | None:
    """Find the engine's language announcement in stderr text."""
    match = _LANGUAGE_RE.search(text)
    return match.group(1) if match else None


class LineBuffer:
    """Holds back an unterminated trailing line until the rest arrives.

    Pipes deliver arbitrary byte ranges, so a segment line can be split
    across two reads. feed() returns only complete lines.
    """

    def __init__(self) -> None:
        self._residue = ""

    def feed(self, chunk: str) -> str:
        """Add a chunk and return all text up to and including its last newline."""
        text = self._residue + chunk
        cut = max(text.rfind("\n"), text.rfind("\r")) + 1
        self._residue = text[cut:]
        return text[:cut]

    def flush(self) -> str:
        """Return whatever is left at end of stream."""
        text, self._residue = self._residue, ""
        return text

    @property
    def pending(self) -> str:
        return self._residue
