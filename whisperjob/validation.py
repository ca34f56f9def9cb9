"""
whisperjob.validation - Dependency checks and validation utilities.

Validates the environment (FFmpeg, engine build, model) and input files
before processing.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import Any

from whisperjob.exceptions import DependencyError, ValidationError


def check_ffmpeg(ffmpeg: str = "ffmpeg") -> dict[str, str]:
    """Check if FFmpeg is installed and get its version.

    Returns:
        Dict with 'ffmpeg_path' and 'ffmpeg_version'

    Raises:
        DependencyError: If FFmpeg not found
    """
    ffmpeg_path = shutil.which(ffmpeg)
    if not ffmpeg_path:
        raise DependencyError(
            "ffmpeg",
            f"{ffmpeg} not found in PATH",
            "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)",
        )

    result = {"ffmpeg_path": ffmpeg_path}
    try:
        proc = subprocess.run(
            [ffmpeg_path, "-version"],
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=5,
        )
        version_line = proc.stdout.split("\n")[0]
        result["ffmpeg_version"] = version_line.split()[2] if version_line else "unknown"
    except (subprocess.TimeoutExpired, IndexError):
        result["ffmpeg_version"] = "unknown"

    return result


def check_engine(executable: Path) -> dict[str, str]:
    """Check that a whisper.cpp build exists and is executable.

    Raises:
        DependencyError: If the binary is missing or not executable
    """
    if not executable.is_file():
        raise DependencyError(
            "whisper.cpp",
            f"Engine binary not found: {executable}",
            "Build whisper.cpp into the matching build-<platform>-<arch> directory",
        )
    if not os.access(executable, os.X_OK):
        raise DependencyError("whisper.cpp", f"Engine binary is not executable: {executable}")
    return {"engine_path": str(executable)}


def check_model(model_path: Path) -> dict[str, Any]:
    """Check that a ggml model file is present.

    Raises:
        DependencyError: If the model file is missing
    """
    if not model_path.is_file():
        raise DependencyError(
            "model",
            f"Model not found: {model_path}",
            "Download with: whisper.cpp/models/download-ggml-model.sh <model>",
        )
    return {
        "model_path": str(model_path),
        "size_mb": model_path.stat().st_size // (1024 * 1024),
    }


def check_disk_space(path: Path, required_mb: int) -> dict[str, Any]:
    """Check if there's enough disk space at the given path.

    Args:
        path: Path to check (will use parent directory if file)
        required_mb: Required space in megabytes

    Returns:
        Dict with 'available_mb', 'required_mb', 'sufficient'

    Raises:
        ValidationError: If disk usage cannot be read
    """
    check_path = path.parent if path.is_file() else path

    while not check_path.exists() and check_path != check_path.parent:
        check_path = check_path.parent

    try:
        stat = shutil.disk_usage(check_path)
    except OSError as e:
        raise ValidationError(f"Cannot check disk space: {e}") from e

    available_mb = stat.free // (1024 * 1024)
    return {
        "available_mb": available_mb,
        "required_mb": required_mb,
        "sufficient": available_mb >= required_mb,
    }


def validate_media_file(path: Path) -> dict[str, Any]:
    """Validate an input media file exists and is non-empty.

    Raises:
        ValidationError: If file doesn't exist, is a directory, or is empty
    """
    if not path.exists():
        raise ValidationError(f"File not found: {path}")

    if not path.is_file():
        raise ValidationError(f"Not a file: {path}")

    size = path.stat().st_size
    if size == 0:
        raise ValidationError(f"File is empty: {path}")

    return {
        "path": str(path),
        "exists": True,
        "size_mb": size // (1024 * 1024),
    }
