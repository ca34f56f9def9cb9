"""
whisperjob.config - YAML config loading and validation.

Handles loading whisperjob.yaml, applying defaults, and validating engine,
model and output settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from whisperjob.engine.command import EngineOptions, ModelSelection, is_supported_language
from whisperjob.exceptions import ConfigError
from whisperjob.transcript.models import ENGINE_OUTPUT_FORMATS, OutputFormat

CONFIG_FILENAME = "whisperjob.yaml"

MODEL_NAMES = {
    "tiny",
    "tiny.en",
    "base",
    "base.en",
    "small",
    "small.en",
    "medium",
    "medium.en",
    "large-v1",
    "large-v2",
    "large-v3",
}


class WhisperJobConfig(BaseModel):
    """Resolved configuration for the transcription pipeline."""

    engine_root: Path = Path("whisper.cpp")
    model: str = "tiny"
    model_path: Path | None = None

    gpu_enabled: bool = True
    accel_enabled: bool = False

    language: str | None = None
    prompt: str | None = None
    output_formats: list[str] = Field(default_factory=list)
    max_segment_length: int | None = Field(default=None, gt=0)

    ffmpeg_binary: str = "ffmpeg"
    records_dir: Path = Path("records")
    engine_timeout_seconds: float | None = Field(default=None, gt=0.0)

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        if v not in MODEL_NAMES:
            raise ValueError(f"model must be one of: {sorted(MODEL_NAMES)}")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str | None) -> str | None:
        if v is not None and not is_supported_language(v):
            raise ValueError(f"Unsupported language: {v}")
        return v

    @field_validator("output_formats")
    @classmethod
    def validate_output_formats(cls, v: list[str]) -> list[str]:
        valid = {fmt.value for fmt in ENGINE_OUTPUT_FORMATS}
        for fmt in v:
            if fmt not in valid:
                raise ValueError(f"output_formats must be drawn from: {sorted(valid)}")
        return v

    @property
    def resolved_model_path(self) -> Path:
        """Explicit model path, or the ggml model named by ``model`` under the engine root."""
        if self.model_path is not None:
            return self.model_path.expanduser().absolute()
        return (self.engine_root / "models" / f"ggml-{self.model}.bin").expanduser().absolute()

    def engine_options(self) -> EngineOptions:
        return EngineOptions(
            language=self.language,
            prompt=self.prompt,
            output_formats=frozenset(OutputFormat(fmt) for fmt in self.output_formats),
            max_segment_length=self.max_segment_length,
        )

    def model_selection(self) -> ModelSelection:
        return ModelSelection(
            model_path=self.resolved_model_path,
            gpu_enabled=self.gpu_enabled,
            accel_enabled=self.accel_enabled,
        )

    def engine_root_path(self) -> Path:
        # The engine runs from its own bin directory, so paths must not be relative.
        return self.engine_root.expanduser().absolute()


def merge_config(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge override values onto a base config. None values do not override."""
    merged = base.copy()
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged


def load_config(config_file: Path | None = None, overrides: dict[str, Any] | None = None) -> WhisperJobConfig:
    """Load and validate configuration.

    Args:
        config_file: Explicit YAML file. When omitted, whisperjob.yaml in the
            current directory is used if present, otherwise defaults.
        overrides: Values that take precedence over the file (e.g. CLI options)

    Returns:
        Validated WhisperJobConfig

    Raises:
        FileNotFoundError: If an explicit config file does not exist
        ConfigError: If the file is not a mapping or fails validation
    """
    raw_config: dict[str, Any] = {}

    if config_file is not None and not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    path = config_file if config_file is not None else Path.cwd() / CONFIG_FILENAME
    if path.exists():
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"{path} must contain a mapping")
        raw_config = loaded

    merged = merge_config(raw_config, overrides or {})
    try:
        return WhisperJobConfig(**merged)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict suitable for writing to YAML."""
    return {
        "engine_root": "whisper.cpp",
        "model": "tiny",
        "gpu_enabled": True,
        "accel_enabled": False,
        "language": None,
        "prompt": None,
        "output_formats": [],
        "max_segment_length": None,
        "ffmpeg_binary": "ffmpeg",
        "records_dir": "records",
        "engine_timeout_seconds": None,
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
