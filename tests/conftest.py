"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from whisperjob.config import WhisperJobConfig
from whisperjob.engine.command import PlatformCapabilities
from whisperjob.transcript.models import TranscriptSegment


@pytest.fixture
def sample_segments() -> list[TranscriptSegment]:
    """Return a short, well-formed transcript."""
    return [
        TranscriptSegment(start="00:00:00.000", end="00:00:02.500", content="Hello there.", id=0),
        TranscriptSegment(
            start="00:00:02.500",
            end="00:00:05.120",
            content="This line\nwraps onto two.",
            id=1,
        ),
        TranscriptSegment(start="01:02:03.456", end="01:02:07.000", content="Much later.", id=2),
    ]


@pytest.fixture
def posix_platform() -> PlatformCapabilities:
    return PlatformCapabilities(os_family="posix", platform="darwin", arch="arm64")


@pytest.fixture
def windows_platform() -> PlatformCapabilities:
    return PlatformCapabilities(os_family="windows", platform="win32", arch="x64")


@pytest.fixture
def job_config(tmp_path: Path) -> WhisperJobConfig:
    """Config rooted in a temporary directory."""
    return WhisperJobConfig(
        engine_root=tmp_path / "whisper.cpp",
        records_dir=tmp_path / "records",
        gpu_enabled=False,
    )


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    """An uploaded recording waiting in the records directory."""
    records = tmp_path / "records"
    records.mkdir(exist_ok=True)
    path = records / "1700000000000-meeting.m4a"
    path.write_bytes(b"fake audio")
    return path
