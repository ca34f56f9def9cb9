"""
whisperjob.extract.audio - FFmpeg audio transcoding.

Produces the canonical engine input: 16kHz, mono, 16-bit PCM WAV.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any

from whisperjob.exceptions import TranscodeError

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000
CHANNELS = 1
CODEC = "pcm_s16le"


def build_transcode_command(source_path: Path, output_path: Path, ffmpeg: str = "ffmpeg") -> list[str]:
    """Build the FFmpeg argv for a canonical transcode."""
    return [
        ffmpeg,
        "-y",
        "-i",
        str(source_path),
        "-vn",
        "-acodec",
        CODEC,
        "-ar",
        str(SAMPLE_RATE),
        "-ac",
        str(CHANNELS),
        str(output_path),
    ]


def transcode_audio(
    source_path: Path,
    output_path: Path,
    ffmpeg: str = "ffmpeg",
) -> dict[str, Any]:
    """Transcode any media file to 16kHz mono PCM WAV using FFmpeg.

    The output file is left in place; removing it is the caller's job.

    Args:
        source_path: Input audio or video file
        output_path: Destination WAV path
        ffmpeg: FFmpeg executable

    Returns:
        Dict with transcode results

    Raises:
        TranscodeError: If FFmpeg is missing or reports an error
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = build_transcode_command(source_path, output_path, ffmpeg)
    logger.info("Transcoding: %s", " ".join(cmd))

    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise TranscodeError(f"Cannot run {ffmpeg}: {e}", source=str(source_path)) from e

    if proc.returncode != 0:
        message = proc.stderr.strip() or f"{ffmpeg} exited with code {proc.returncode}"
        logger.error("Cannot transcode %s: %s", source_path, message)
        raise TranscodeError(message, source=str(source_path))

    logger.debug("Transcoding succeeded: %s", output_path)
    result: dict[str, Any] = {
        "source": str(source_path),
        "output": str(output_path),
        "sample_rate": SAMPLE_RATE,
        "channels": CHANNELS,
    }
    if output_path.exists():
        result["size"] = output_path.stat().st_size
    return result
