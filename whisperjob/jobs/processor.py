"""
whisperjob.jobs.processor - Run one transcription job end to end.

A job moves QUEUED → TRANSCODING → TRANSCRIBING → COLLECTING and ends in
exactly one of DONE_SUCCESS or DONE_ERROR. Entering a done state always
removes the job's input file and its transcoded WAV.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Mapping
from contextlib import closing
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from whisperjob.config import WhisperJobConfig
from whisperjob.engine.command import PlatformCapabilities, build_command
from whisperjob.engine.events import (
    Aborted,
    Completed,
    Failed,
    LanguageDetected,
    Progress,
    TranscriptEvent,
)
from whisperjob.engine.invoker import EngineInvoker
from whisperjob.exceptions import ErrorCode, TranscodeError
from whisperjob.extract.audio import transcode_audio
from whisperjob.io import remove_file
from whisperjob.transcript.models import TranscriptSegment, renumber

logger = logging.getLogger(__name__)

PAYLOAD_KEYS = ("input_path", "sourceFile")


class JobState(str, Enum):
    QUEUED = "queued"
    TRANSCODING = "transcoding"
    TRANSCRIBING = "transcribing"
    COLLECTING = "collecting"
    DONE_SUCCESS = "done_success"
    DONE_ERROR = "done_error"

    @property
    def is_done(self) -> bool:
        return self in (JobState.DONE_SUCCESS, JobState.DONE_ERROR)


@dataclass
class Job:
    """One queued transcription job and the temp files it owns."""

    job_id: str
    input_path: Path
    canonical_audio_path: Path | None = None
    state: JobState = JobState.QUEUED

    def __post_init__(self) -> None:
        self.input_path = Path(self.input_path)
        if self.canonical_audio_path is None:
            self.canonical_audio_path = self.input_path.with_name(self.input_path.name + ".wav")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Job:
        """Build a job from a queue payload.

        Raises:
            ValueError: If the payload names no input file
        """
        input_path = next((payload[key] for key in PAYLOAD_KEYS if payload.get(key)), None)
        if not input_path:
            raise ValueError(f"Job payload has no input path: {dict(payload)}")
        path = Path(input_path)
        return cls(job_id=str(payload.get("job_id") or path.name), input_path=path)


@dataclass(frozen=True)
class JobError:
    code: ErrorCode
    message: str = ""


@dataclass
class JobResult:
    """Terminal outcome of a job, delivered once to the queue."""

    job_id: str
    state: JobState
    batches: list[list[TranscriptSegment]] = field(default_factory=list)
    error: JobError | None = None
    detected_language: str | None = None

    @property
    def ok(self) -> bool:
        return self.state == JobState.DONE_SUCCESS

    def segments(self) -> list[TranscriptSegment]:
        """All segments in arrival order, renumbered 0..n-1 across batches.

        Each batch keeps the ids the engine output parser assigned, which
        restart at 0 per batch; use this view when ids must be unique.
        """
        return renumber(itertools.chain.from_iterable(self.batches))

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {
                "job_id": self.job_id,
                "error": {"code": self.error.code.value, "message": self.error.message},
            }
        return {
            "job_id": self.job_id,
            "language": self.detected_language,
            "batches": [[seg.to_dict() for seg in batch] for batch in self.batches],
        }


Transcoder = Callable[..., Any]
EventObserver = Callable[[TranscriptEvent], None]


class JobProcessor:
    """Transcodes a job's input, runs the engine and collects its segments."""

    def __init__(
        self,
        config: WhisperJobConfig,
        capabilities: PlatformCapabilities,
        invoker: EngineInvoker | None = None,
        transcoder: Transcoder = transcode_audio,
        on_event: EventObserver | None = None,
    ) -> None:
        self.config = config
        self.capabilities = capabilities
        self.invoker = invoker or EngineInvoker()
        self.transcoder = transcoder
        self.on_event = on_event

    def handle(
        self,
        payload: Mapping[str, Any],
        done: Callable[[JobResult], None],
        cancel: threading.Event | None = None,
    ) -> JobResult:
        """Queue entry point: process a payload and report the result exactly once."""
        try:
            job = Job.from_payload(payload)
        except (ValueError, TypeError, AttributeError) as e:
            logger.error("Rejecting job: %s", e)
            job_id = payload.get("job_id", "") if isinstance(payload, Mapping) else ""
            result = JobResult(
                job_id=str(job_id),
                state=JobState.DONE_ERROR,
                error=JobError(ErrorCode.INTERNAL, str(e)),
            )
        else:
            result = self.process(job, cancel=cancel)
        done(result)
        return result

    def process(self, job: Job, cancel: threading.Event | None = None) -> JobResult:
        """Run a job to a done state.

        Failures come back as a DONE_ERROR result rather than an exception,
        and temp files are removed whichever way the job ends.

        Args:
            job: Job to run
            cancel: Set to kill the engine; the job then ends with what it has

        Returns:
            JobResult in DONE_SUCCESS or DONE_ERROR
        """
        logger.info("Processing job %s (%s)", job.job_id, job.input_path)

        if not job.input_path.exists():
            logger.info("Job %s input %s is gone, nothing to do", job.job_id, job.input_path)
            return self._finish(job, JobState.DONE_SUCCESS)

        try:
            return self._run(job, cancel)
        except TranscodeError as e:
            return self._finish(job, JobState.DONE_ERROR, error=JobError(e.code, e.message))
        except Exception as e:  # noqa: BLE001 - reported through the result, never raised to the queue
            logger.exception("Job %s failed unexpectedly", job.job_id)
            return self._finish(job, JobState.DONE_ERROR, error=JobError(ErrorCode.INTERNAL, str(e)))

    def _run(self, job: Job, cancel: threading.Event | None) -> JobResult:
        assert job.canonical_audio_path is not None

        self._enter(job, JobState.TRANSCODING)
        self.transcoder(job.input_path, job.canonical_audio_path, self.config.ffmpeg_binary)

        self._enter(job, JobState.TRANSCRIBING)
        command = build_command(
            file_path=job.canonical_audio_path.absolute(),
            model=self.config.model_selection(),
            options=self.config.engine_options(),
            capabilities=self.capabilities,
            engine_root=self.config.engine_root_path(),
        )

        batches: list[list[TranscriptSegment]] = []
        language: str | None = None
        events = self.invoker.run(
            command,
            job_id=job.job_id,
            cancel=cancel,
            timeout=self.config.engine_timeout_seconds,
        )
        with closing(events):
            for event in events:
                if self.on_event is not None:
                    self.on_event(event)

                if isinstance(event, Progress):
                    if job.state != JobState.COLLECTING:
                        self._enter(job, JobState.COLLECTING)
                    batches.append(list(event.segments))
                elif isinstance(event, LanguageDetected):
                    language = event.code
                elif isinstance(event, (Completed, Aborted)):
                    return self._finish(
                        job, JobState.DONE_SUCCESS, batches=batches, detected_language=language
                    )
                elif isinstance(event, Failed):
                    return self._finish(
                        job,
                        JobState.DONE_ERROR,
                        error=JobError(event.error_code, event.message),
                        detected_language=language,
                    )

        return self._finish(
            job,
            JobState.DONE_ERROR,
            error=JobError(ErrorCode.INTERNAL, "engine output ended without a result"),
        )

    def _enter(self, job: Job, state: JobState) -> None:
        logger.debug("Job %s: %s -> %s", job.job_id, job.state.value, state.value)
        job.state = state

    def _cleanup(self, job: Job) -> None:
        for path in (job.canonical_audio_path, job.input_path):
            try:
                if remove_file(path):
                    logger.debug("Removed %s", path)
            except OSError as e:
                logger.warning("Could not remove %s: %s", path, e)

    def _finish(
        self,
        job: Job,
        state: JobState,
        batches: list[list[TranscriptSegment]] | None = None,
        error: JobError | None = None,
        detected_language: str | None = None,
    ) -> JobResult:
        self._enter(job, state)
        self._cleanup(job)

        if error is not None:
            logger.warning("Job %s failed: %s %s", job.job_id, error.code.value, error.message)
        else:
            logger.info("Job %s finished with %d batch(es)", job.job_id, len(batches or []))

        return JobResult(
            job_id=job.job_id,
            state=state,
            batches=batches or [],
            error=error,
            detected_language=detected_language,
        )
