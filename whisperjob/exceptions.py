"""
whisperjob.exceptions - Custom exception classes and job error codes.

All whisperjob-specific exceptions inherit from WhisperJobError.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Structured error codes carried by failed jobs and terminal events."""

    TRANSCODE = "ERROR_TRANSCODE"
    ENGINE_EXIT = "ERROR_ENGINE_EXIT"
    SPAWN = "ERROR_SPAWN"
    ABORTED = "ERROR_ABORTED"
    TIMEOUT = "ERROR_TIMEOUT"
    INTERNAL = "ERROR_INTERNAL"


class WhisperJobError(Exception):
    """Base exception for all whisperjob errors."""

    pass


class ConfigError(WhisperJobError):
    """Configuration loading or validation error."""

    pass


class TranscodeError(WhisperJobError):
    """Audio transcoding error, carrying the conversion tool's message."""

    code = ErrorCode.TRANSCODE

    def __init__(self, message: str, source: str | None = None):
        self.message = message
        self.source = source
        super().__init__(message)


class FormatError(WhisperJobError):
    """Malformed subtitle input or timestamp."""

    pass


class ValidationError(WhisperJobError):
    """Input file or environment validation error."""

    pass


class DependencyError(WhisperJobError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
