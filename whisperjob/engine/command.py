"""
whisperjob.engine.command - whisper.cpp command construction.

Builds the executable path, arguments, working directory and environment
for one engine run. Platform details come in through PlatformCapabilities
so that building a command never reads process state.
"""

from __future__ import annotations

import os
import platform as platform_module
import shlex
import sys
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from whisperjob.transcript.models import ENGINE_OUTPUT_FORMATS, OutputFormat

SIMPLIFIED_CHINESE = "zh_CN"
TRADITIONAL_CHINESE = "zh_TW"
CHINESE = "zh"
AUTO_DETECT = "auto"
SIMPLIFIED_CHINESE_MARKER = "简体中文"

_FORMAT_FLAGS = {
    OutputFormat.TXT: "-otxt",
    OutputFormat.SRT: "-osrt",
    OutputFormat.VTT: "-ovtt",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

LANGUAGES: dict[str, str] = {
    "en": "english",
    "zh_CN": "simplified chinese",
    "zh_TW": "traditional chinese",
    "ja": "japanese",
    "ko": "korean",
    "fr": "french",
    "es": "spanish",
    "ru": "russian",
    "ar": "arabic",
    "th": "thai",
    "de": "german",
    "pt": "portuguese",
    "it": "italian",
    "hi": "hindi",
    "id": "indonesian",
    "tr": "turkish",
    "vi": "vietnamese",
    "he": "hebrew",
    "el": "greek",
    "pl": "polish",
    "nl": "dutch",
    "hu": "hungarian",
    "no": "norwegian",
    "sv": "swedish",
    "fi": "finnish",
    "cs": "czech",
    "da": "danish",
    "lt": "lithuanian",
    "sk": "slovak",
    "ms": "malay",
    "ro": "romanian",
    "bg": "bulgarian",
    "hr": "croatian",
    "lo": "lao",
    "ur": "urdu",
    "ta": "tamil",
}


def is_supported_language(code: str) -> bool:
    """Check whether a language code can be requested from the engine.

    The generic "zh" code is accepted too, since that is what the Chinese
    variants resolve to, and so is "auto", which makes the engine detect
    the language and announce it on stderr.
    """
    return code in LANGUAGES or code in (CHINESE, AUTO_DETECT)


@dataclass(frozen=True)
class PlatformCapabilities:
    """The host facts that decide which engine build to run."""

    os_family: str
    platform: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os_family == "windows"

    @classmethod
    def detect(cls) -> PlatformCapabilities:
        """Read the current host's platform. Call once, at the application edge."""
        plat = "win32" if sys.platform.startswith("win") else sys.platform
        machine = platform_module.machine().lower()
        arch = _ARCH_ALIASES.get(machine, machine or "x64")
        os_family = "windows" if plat == "win32" else "posix"
        return cls(os_family=os_family, platform=plat, arch=arch)


@dataclass(frozen=True)
class EngineOptions:
    """Per-run engine flags."""

    language: str | None = None
    prompt: str | None = None
    output_formats: frozenset[OutputFormat] = frozenset()
    max_segment_length: int | None = None

    def __post_init__(self) -> None:
        if self.max_segment_length is not None and self.max_segment_length <= 0:
            raise ValueError("max_segment_length must be a positive integer")


@dataclass(frozen=True)
class ModelSelection:
    """Which model to load and which acceleration to ask for."""

    model_path: Path
    gpu_enabled: bool = False
    accel_enabled: bool = False


@dataclass(frozen=True)
class EngineBinary:
    """A resolved engine build: the executable and where it must run from."""

    executable: Path
    cwd: Path
    env: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class EngineCommand:
    """A fully built engine invocation."""

    executable: Path
    args: tuple[str, ...]
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)

    @property
    def argv(self) -> list[str]:
        return [str(self.executable), *self.args]

    def shell_line(self) -> str:
        """Render the command as a quoted shell line, for logs."""
        prefix = " ".join(f"{key}={shlex.quote(value)}" for key, value in self.env.items())
        line = shlex.join(self.argv)
        return f"{prefix} {line}" if prefix else line

    def process_env(self) -> dict[str, str] | None:
        """Environment for the subprocess: the parent's plus the build's extras."""
        if not self.env:
            return None
        return {**os.environ, **self.env}


def resolve_language(language: str | None, prompt: str | None) -> tuple[str | None, str]:
    """Apply the Chinese variant aliases.

    Simplified Chinese runs as "zh" with a marker appended to the prompt,
    which steers the engine away from traditional characters. Traditional
    Chinese runs as plain "zh".

    Args:
        language: Requested language code
        prompt: Requested prompt text

    Returns:
        Tuple of (effective language, effective prompt)
    """
    prompt = prompt or ""
    if language == SIMPLIFIED_CHINESE:
        return CHINESE, f"{prompt} {SIMPLIFIED_CHINESE_MARKER}".strip()
    if language == TRADITIONAL_CHINESE:
        return CHINESE, prompt
    return language or None, prompt


def build_flags(options: EngineOptions) -> list[str]:
    """Build the option flags that precede the model and input arguments."""
    flags: list[str] = []

    language, prompt = resolve_language(options.language, options.prompt)
    if language:
        flags += ["-l", language]
    if prompt:
        flags += ["--prompt", prompt]

    for fmt in ENGINE_OUTPUT_FORMATS:
        if fmt in options.output_formats:
            flags.append(_FORMAT_FLAGS[fmt])

    if options.max_segment_length:
        flags += ["-ml", str(options.max_segment_length)]

    return flags


@lru_cache(maxsize=None)
def resolve_engine_binary(
    engine_root: Path,
    capabilities: PlatformCapabilities,
    gpu_enabled: bool,
    accel_enabled: bool,
) -> EngineBinary:
    """Pick the engine build for a platform.

    Windows builds come in a CUDA variant selected by the GPU flag; POSIX
    builds come in a Core ML variant selected by the acceleration flag.
    Each flag is ignored on the other platform family.

    Args:
        engine_root: whisper.cpp checkout containing the build-* directories
        capabilities: Host platform
        gpu_enabled: Use the GPU build (Windows only)
        accel_enabled: Use the Core ML build (POSIX only)

    Returns:
        Resolved EngineBinary
    """
    if capabilities.is_windows:
        build = "build-win32-x64-gpu" if gpu_enabled else "build-win32-x64"
        bin_dir = engine_root / build / "bin" / "Release"
        return EngineBinary(executable=bin_dir / "main.exe", cwd=bin_dir)

    build = f"build-{capabilities.platform}-{capabilities.arch}"
    if accel_enabled:
        build += "-coreml"
    bin_dir = engine_root / build / "bin"
    return EngineBinary(
        executable=bin_dir / "main",
        cwd=bin_dir,
        env=(("DYLD_LIBRARY_PATH", str(bin_dir.parent)),),
    )


def build_command(
    file_path: Path,
    model: ModelSelection,
    options: EngineOptions,
    capabilities: PlatformCapabilities,
    engine_root: Path,
) -> EngineCommand:
    """Build the complete engine command for one input file.

    Args:
        file_path: Canonical 16kHz mono WAV to transcribe
        model: Model path and acceleration flags
        options: Language, prompt, output format and segment length flags
        capabilities: Host platform
        engine_root: whisper.cpp checkout

    Returns:
        EngineCommand ready to hand to a ProcessRunner
    """
    binary = resolve_engine_binary(
        engine_root, capabilities, model.gpu_enabled, model.accel_enabled
    )
    args = [
        *build_flags(options),
        "-m",
        str(model.model_path),
        "-f",
        os.path.normpath(str(file_path)),
    ]
    return EngineCommand(
        executable=binary.executable,
        args=tuple(args),
        cwd=binary.cwd,
        env=dict(binary.env),
    )
