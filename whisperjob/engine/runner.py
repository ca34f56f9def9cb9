"""
whisperjob.engine.runner - Subprocess façade for the engine.

The invoker only talks to a ProcessRunner, so tests can substitute a fake
process and production code runs the real binary through subprocess.Popen.
"""

from __future__ import annotations

import codecs
import logging
import subprocess
from collections.abc import Iterator
from typing import IO, Protocol

from whisperjob.engine.command import EngineCommand

logger = logging.getLogger(__name__)

READ_SIZE = 4096


class ProcessHandle(Protocol):
    """A running engine process.

    wait() raises subprocess.TimeoutExpired when the timeout runs out first.
    """

    def stdout_chunks(self) -> Iterator[str]: ...

    def stderr_chunks(self) -> Iterator[str]: ...

    def wait(self, timeout: float | None = None) -> int: ...

    def poll(self) -> int | None: ...

    def kill(self) -> None: ...


class ProcessRunner(Protocol):
    """Starts engine processes. Raises OSError when the process cannot start."""

    def start(self, command: EngineCommand) -> ProcessHandle: ...


def iter_decoded(stream: IO[bytes], read_size: int = READ_SIZE) -> Iterator[str]:
    """Yield text chunks from a binary pipe as soon as each read returns.

    Decoding is incremental, so a multi-byte character split between reads
    comes out whole in the later chunk.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for data in iter(lambda: stream.read(read_size), b""):
        text = decoder.decode(data)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


class PopenHandle:
    """ProcessHandle backed by subprocess.Popen."""

    def __init__(self, process: subprocess.Popen) -> None:
        self.process = process

    def stdout_chunks(self) -> Iterator[str]:
        assert self.process.stdout is not None
        return iter_decoded(self.process.stdout)

    def stderr_chunks(self) -> Iterator[str]:
        assert self.process.stderr is not None
        return iter_decoded(self.process.stderr)

    def wait(self, timeout: float | None = None) -> int:
        return self.process.wait(timeout=timeout)

    def poll(self) -> int | None:
        return self.process.poll()

    def kill(self) -> None:
        if self.process.poll() is None:
            logger.debug("Killing engine process %s", self.process.pid)
            self.process.kill()
            self.process.wait()


class SubprocessRunner:
    """Runs engine commands as real child processes."""

    def start(self, command: EngineCommand) -> PopenHandle:
        # Unbuffered pipes so each read returns whatever the engine has flushed.
        process = subprocess.Popen(  # noqa: S603 - argv built by build_command
            command.argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=str(command.cwd) if command.cwd else None,
            env=command.process_env(),
            bufsize=0,
        )
        return PopenHandle(process)
