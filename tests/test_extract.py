"""Tests for whisperjob.extract.audio module."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from whisperjob.exceptions import ErrorCode, TranscodeError
from whisperjob.extract import audio
from whisperjob.extract.audio import build_transcode_command, transcode_audio


class TestBuildTranscodeCommand:
    def test_canonical_pcm_settings(self, tmp_path: Path) -> None:
        cmd = build_transcode_command(tmp_path / "in.mp4", tmp_path / "out.wav")
        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-acodec") + 1] == "pcm_s16le"
        assert cmd[cmd.index("-ar") + 1] == "16000"
        assert cmd[cmd.index("-ac") + 1] == "1"
        assert "-vn" in cmd
        assert cmd[-1] == str(tmp_path / "out.wav")

    def test_custom_binary(self, tmp_path: Path) -> None:
        cmd = build_transcode_command(tmp_path / "a", tmp_path / "b", ffmpeg="/usr/local/bin/ffmpeg")
        assert cmd[0] == "/usr/local/bin/ffmpeg"


class TestTranscodeAudio:
    @pytest.mark.slow
    def test_transcode_real_file(self, tmp_path: Path) -> None:
        """Test transcoding with real FFmpeg."""
        pytest.skip("Requires FFmpeg and a media file - run manually")

    def test_ffmpeg_error_carries_message(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="in.mp4: Invalid data found\n")

        monkeypatch.setattr(audio.subprocess, "run", fake_run)

        with pytest.raises(TranscodeError) as excinfo:
            transcode_audio(tmp_path / "in.mp4", tmp_path / "out.wav")

        assert excinfo.value.code == ErrorCode.TRANSCODE
        assert excinfo.value.message == "in.mp4: Invalid data found"
        assert excinfo.value.source == str(tmp_path / "in.mp4")

    def test_missing_ffmpeg_binary(self, tmp_path: Path) -> None:
        source = tmp_path / "in.mp4"
        source.write_bytes(b"x")
        with pytest.raises(TranscodeError):
            transcode_audio(source, tmp_path / "out.wav", ffmpeg="definitely-not-ffmpeg-xyz")

    def test_success_keeps_output(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        output = tmp_path / "nested" / "out.wav"

        def fake_run(cmd, **kwargs):
            Path(cmd[-1]).write_bytes(b"RIFF....WAVE")
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(audio.subprocess, "run", fake_run)

        result = transcode_audio(tmp_path / "in.mp4", output)

        assert output.exists()
        assert result["sample_rate"] == 16000
        assert result["channels"] == 1
        assert result["size"] == 12


def write_fake_ffmpeg(directory: Path, exit_code: int) -> Path:
    """A stand-in ffmpeg that writes non-UTF-8 bytes to stderr."""
    script = directory / "fake-ffmpeg"
    script.write_text(
        f"#!{sys.executable}\n"
        "import sys\n"
        "open(sys.argv[-1], 'wb').close()\n"
        "sys.stderr.buffer.write(b'Metadata: title \\xff\\xfe broken\\n')\n"
        f"sys.exit({exit_code})\n"
    )
    script.chmod(0o755)
    return script


@pytest.mark.skipif(os.name == "nt", reason="shebang scripts need POSIX")
class TestUndecodableStderr:
    def test_success_with_invalid_utf8(self, tmp_path: Path) -> None:
        ffmpeg = write_fake_ffmpeg(tmp_path, exit_code=0)
        output = tmp_path / "out.wav"

        result = transcode_audio(tmp_path / "in.mp4", output, ffmpeg=str(ffmpeg))

        assert output.exists()
        assert result["output"] == str(output)

    def test_failure_keeps_transcode_code(self, tmp_path: Path) -> None:
        ffmpeg = write_fake_ffmpeg(tmp_path, exit_code=1)

        with pytest.raises(TranscodeError) as excinfo:
            transcode_audio(tmp_path / "in.mp4", tmp_path / "out.wav", ffmpeg=str(ffmpeg))

        assert excinfo.value.code == ErrorCode.TRANSCODE
        assert "Metadata: title" in excinfo.value.message
        assert "�" in excinfo.value.message
