"""
whisperjob.engine.invoker - Run the engine and stream its events.

One EngineInvoker.run() call spawns one engine process and turns its two
output pipes into a single ordered iterator of TranscriptEvent. Each pipe
is drained by its own reader thread into a shared queue, so neither pipe
can fill up and stall the engine while the other is being read.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
import time
from collections import deque
from collections.abc import Callable, Iterator

from whisperjob.engine.command import EngineCommand
from whisperjob.engine.events import (
    Aborted,
    Completed,
    Failed,
    LanguageDetected,
    Progress,
    Started,
    TranscriptEvent,
)
from whisperjob.engine.parser import LineBuffer, detect_language, parse_output_chunk
from whisperjob.engine.runner import ProcessHandle, ProcessRunner, SubprocessRunner
from whisperjob.exceptions import ErrorCode

logger = logging.getLogger(__name__)

STDOUT = "stdout"
STDERR = "stderr"
STDERR_TAIL_LINES = 20


def _pump(name: str, chunks: Callable[[], Iterator[str]], sink: queue.Queue) -> None:
    """Copy one pipe's chunks into the queue, then post an end-of-stream marker."""
    try:
        for chunk in chunks():
            sink.put((name, chunk))
    except (OSError, ValueError) as e:
        logger.warning("Engine %s reader stopped: %s", name, e)
    finally:
        sink.put((name, None))


def _interruption(cancel: threading.Event | None, deadline: float | None) -> ErrorCode | None:
    if cancel is not None and cancel.is_set():
        return ErrorCode.ABORTED
    if deadline is not None and time.monotonic() > deadline:
        return ErrorCode.TIMEOUT
    return None


class EngineInvoker:
    """Spawns the engine and yields its events in arrival order."""

    def __init__(self, runner: ProcessRunner | None = None, poll_interval: float = 0.1) -> None:
        self.runner = runner or SubprocessRunner()
        self.poll_interval = poll_interval

    def run(
        self,
        command: EngineCommand,
        job_id: str = "0",
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> Iterator[TranscriptEvent]:
        """Run one engine process.

        Args:
            command: Built engine command
            job_id: Identifier carried on every event
            cancel: Set to kill the process and end with Aborted
            timeout: Seconds before the process is killed and the run Aborted

        Yields:
            Started, then Progress/LanguageDetected, then one terminal event
        """
        yield Started(job_id)
        logger.info("Engine command: %s", command.shell_line())

        try:
            handle = self.runner.start(command)
        except OSError as e:
            logger.error("Engine could not start: %s", e)
            yield Failed(job_id, ErrorCode.SPAWN, str(e))
            return

        try:
            yield from self._stream(handle, job_id, cancel, timeout)
        finally:
            handle.kill()

    def _abort(self, handle: ProcessHandle, job_id: str, reason: ErrorCode) -> Aborted:
        if reason == ErrorCode.TIMEOUT:
            logger.warning("Job %s ran out of time, killing engine", job_id)
        else:
            logger.info("Job %s cancelled, killing engine", job_id)
        handle.kill()
        return Aborted(job_id, reason)

    def _stream(
        self,
        handle: ProcessHandle,
        job_id: str,
        cancel: threading.Event | None,
        timeout: float | None,
    ) -> Iterator[TranscriptEvent]:
        sink: queue.Queue = queue.Queue()
        for name, chunks in ((STDOUT, handle.stdout_chunks), (STDERR, handle.stderr_chunks)):
            threading.Thread(
                target=_pump,
                args=(name, chunks, sink),
                name=f"whisperjob-{job_id}-{name}",
                daemon=True,
            ).start()

        buffers = {STDOUT: LineBuffer(), STDERR: LineBuffer()}
        stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        deadline = time.monotonic() + timeout if timeout else None
        open_streams = 2

        while open_streams:
            reason = _interruption(cancel, deadline)
            if reason is not None:
                yield self._abort(handle, job_id, reason)
                return

            try:
                name, chunk = sink.get(timeout=self.poll_interval)
            except queue.Empty:
                continue

            if chunk is None:
                open_streams -= 1
                text = buffers[name].flush()
            else:
                text = buffers[name].feed(chunk)
            if not text:
                continue

            if name == STDOUT:
                segments = parse_output_chunk(text)
                if segments:
                    yield Progress(job_id, tuple(segments))
            else:
                for line in text.splitlines():
                    logger.debug("engine stderr: %s", line)
                    stderr_tail.append(line)
                    code = detect_language(line)
                    if code:
                        logger.info("Detected language: %s", code)
                        yield LanguageDetected(job_id, code)

        # The pipes can close before the process exits.
        while True:
            reason = _interruption(cancel, deadline)
            if reason is not None:
                yield self._abort(handle, job_id, reason)
                return
            try:
                exit_code = handle.wait(timeout=self.poll_interval)
                break
            except subprocess.TimeoutExpired:
                continue

        logger.info("Engine exited with code %s", exit_code)
        if exit_code == 0:
            yield Completed(job_id)
        else:
            message = "\n".join(stderr_tail)
            yield Failed(job_id, ErrorCode.ENGINE_EXIT, f"exit code {exit_code}: {message}".strip())
