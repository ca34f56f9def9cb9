"""Tests for whisperjob.engine.parser module."""

from __future__ import annotations

from whisperjob.engine.parser import LineBuffer, detect_language, parse_output_chunk


class TestParseOutputChunk:
    def test_single_line(self) -> None:
        segments = parse_output_chunk("[00:00:01.000 --> 00:00:02.000] hello\n")
        assert len(segments) == 1
        assert segments[0].start == "00:00:01.000"
        assert segments[0].end == "00:00:02.000"
        assert segments[0].content == "hello"
        assert segments[0].id == 0

    def test_ids_restart_per_chunk(self) -> None:
        first = parse_output_chunk(
            "[00:00:00.000 --> 00:00:01.000] a\n[00:00:01.000 --> 00:00:02.000] b\n"
        )
        second = parse_output_chunk("[00:00:02.000 --> 00:00:03.000] c\n")
        assert [s.id for s in first] == [0, 1]
        assert [s.id for s in second] == [0]

    def test_whitespace_only_chunk(self) -> None:
        assert parse_output_chunk("\n   \n") == []

    def test_noise_lines_dropped(self) -> None:
        chunk = (
            "whisper_init_from_file: loading model\n"
            "[00:00:00.000 --> 00:00:01.000]   kept  \n"
            "[0:00:00.000 --> 00:00:01.000] bad timestamp\n"
        )
        segments = parse_output_chunk(chunk)
        assert [s.content for s in segments] == ["kept"]

    def test_out_of_range_minutes_rejected(self) -> None:
        assert parse_output_chunk("[00:61:00.000 --> 00:61:01.000] nope\n") == []

    def test_non_ascii_content(self) -> None:
        segments = parse_output_chunk("[00:08:22.000 --> 00:08:25.580]   [ 기존경상 / rod ]\n")
        assert segments[0].content == "[ 기존경상 / rod ]"

    def test_crlf_line_endings(self) -> None:
        segments = parse_output_chunk("[00:00:00.000 --> 00:00:01.000] a\r\n")
        assert segments[0].content == "a"

    def test_unicode_separator_kept_in_content(self) -> None:
        segments = parse_output_chunk("[00:00:00.000 --> 00:00:01.000] a\u2028b\n")
        assert [s.content for s in segments] == ["a\u2028b"]

    def test_carriage_return_separates_lines(self) -> None:
        chunk = "[00:00:00.000 --> 00:00:01.000] a\r[00:00:01.000 --> 00:00:02.000] b\r"
        assert [s.content for s in parse_output_chunk(chunk)] == ["a", "b"]


class TestDetectLanguage:
    def test_announcement(self) -> None:
        text = "whisper_full_with_state: auto-detected language: en (p = 0.970215)\n"
        assert detect_language(text) == "en"

    def test_no_announcement(self) -> None:
        assert detect_language("whisper_print_timings: load time = 10 ms\n") is None


class TestLineBuffer:
    def test_complete_lines_pass_through(self) -> None:
        buffer = LineBuffer()
        assert buffer.feed("a\nb\n") == "a\nb\n"
        assert buffer.pending == ""

    def test_partial_line_held_back(self) -> None:
        buffer = LineBuffer()
        assert buffer.feed("[00:00:00.000 --> 00:00:01.000] hel") == ""
        assert buffer.feed("lo\nnext") == "[00:00:00.000 --> 00:00:01.000] hello\n"
        assert buffer.pending == "next"

    def test_flush_returns_residue(self) -> None:
        buffer = LineBuffer()
        buffer.feed("tail")
        assert buffer.flush() == "tail"
        assert buffer.flush() == ""

    def test_split_segment_parsed_once_joined(self) -> None:
        buffer = LineBuffer()
        chunks = ["[00:00:01.000 --> 00:0", "0:02.000] split line\n"]
        texts = [buffer.feed(chunk) for chunk in chunks]
        assert parse_output_chunk(texts[0]) == []
        assert parse_output_chunk(texts[1])[0].content == "split line"
