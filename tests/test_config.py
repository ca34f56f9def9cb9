"""Tests for whisperjob.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from whisperjob.config import (
    WhisperJobConfig,
    create_default_config,
    load_config,
    merge_config,
    write_config,
)
from whisperjob.exceptions import ConfigError
from whisperjob.transcript.models import OutputFormat


class TestWhisperJobConfig:
    def test_defaults(self) -> None:
        config = WhisperJobConfig()
        assert config.model == "tiny"
        assert config.gpu_enabled is True
        assert config.accel_enabled is False
        assert config.output_formats == []
        assert config.engine_timeout_seconds is None

    def test_invalid_model(self) -> None:
        with pytest.raises(ValueError):
            WhisperJobConfig(model="huge")

    def test_invalid_language(self) -> None:
        with pytest.raises(ValueError):
            WhisperJobConfig(language="xx")

    def test_auto_language_accepted(self) -> None:
        assert WhisperJobConfig(language="auto").engine_options().language == "auto"

    def test_chinese_variants_accepted(self) -> None:
        assert WhisperJobConfig(language="zh_CN").language == "zh_CN"
        assert WhisperJobConfig(language="zh_TW").language == "zh_TW"

    def test_lrc_is_not_an_engine_format(self) -> None:
        with pytest.raises(ValueError):
            WhisperJobConfig(output_formats=["lrc"])

    def test_max_segment_length_positive(self) -> None:
        with pytest.raises(ValueError):
            WhisperJobConfig(max_segment_length=0)

    def test_resolved_model_path_from_name(self, tmp_path: Path) -> None:
        config = WhisperJobConfig(engine_root=tmp_path, model="base.en")
        assert config.resolved_model_path == tmp_path / "models" / "ggml-base.en.bin"

    def test_explicit_model_path_wins(self, tmp_path: Path) -> None:
        config = WhisperJobConfig(model_path=tmp_path / "custom.bin")
        assert config.resolved_model_path == tmp_path / "custom.bin"

    def test_relative_paths_made_absolute(self) -> None:
        config = WhisperJobConfig(engine_root=Path("engines/whisper.cpp"))
        assert config.engine_root_path().is_absolute()
        assert config.resolved_model_path.is_absolute()

    def test_engine_options(self) -> None:
        config = WhisperJobConfig(language="en", prompt="hi", output_formats=["srt"], max_segment_length=40)
        options = config.engine_options()
        assert options.language == "en"
        assert options.prompt == "hi"
        assert options.output_formats == frozenset({OutputFormat.SRT})
        assert options.max_segment_length == 40


class TestMergeConfig:
    def test_none_does_not_override(self) -> None:
        assert merge_config({"model": "base"}, {"model": None}) == {"model": "base"}

    def test_override_wins(self) -> None:
        assert merge_config({"model": "base"}, {"model": "small"}) == {"model": "small"}

    def test_false_overrides(self) -> None:
        assert merge_config({"gpu_enabled": True}, {"gpu_enabled": False}) == {"gpu_enabled": False}


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == WhisperJobConfig()

    def test_reads_cwd_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "whisperjob.yaml").write_text("model: small\nlanguage: de\n")
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config.model == "small"
        assert config.language == "de"

    def test_explicit_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_overrides_beat_file(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("model: small\n")
        assert load_config(path, overrides={"model": "medium"}).model == "medium"

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("model: huge\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("")
        assert load_config(path).model == "tiny"


class TestWriteConfig:
    def test_default_config_loads_back(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "whisperjob.yaml"
        write_config(create_default_config(), path)

        with open(path) as f:
            assert yaml.safe_load(f) == create_default_config()
        assert load_config(path) == WhisperJobConfig()
