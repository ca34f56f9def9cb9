"""
whisperjob.engine.events - Events emitted while an engine run progresses.

A run yields exactly one Started, then any number of Progress and
LanguageDetected events, then exactly one terminal event (Completed,
Failed or Aborted).
"""

from __future__ import annotations

from dataclasses import dataclass

from whisperjob.exceptions import ErrorCode
from whisperjob.transcript.models import TranscriptSegment


@dataclass(frozen=True, slots=True)
class TranscriptEvent:
    job_id: str

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Started(TranscriptEvent):
    pass


@dataclass(frozen=True, slots=True)
class Progress(TranscriptEvent):
    segments: tuple[TranscriptSegment, ...] = ()


@dataclass(frozen=True, slots=True)
class LanguageDetected(TranscriptEvent):
    code: str = ""


@dataclass(frozen=True, slots=True)
class Completed(TranscriptEvent):
    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failed(TranscriptEvent):
    error_code: ErrorCode = ErrorCode.ENGINE_EXIT
    message: str = ""

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Aborted(TranscriptEvent):
    error_code: ErrorCode = ErrorCode.ABORTED

    @property
    def is_terminal(self) -> bool:
        return True
