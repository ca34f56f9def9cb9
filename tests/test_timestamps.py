"""Tests for whisperjob.transcript.timestamps module."""

from __future__ import annotations

import pytest

from whisperjob.exceptions import FormatError
from whisperjob.transcript.timestamps import (
    from_srt_timestamp,
    is_timestamp,
    split_timestamp,
    to_lrc_timestamp,
    to_srt_timestamp,
)


class TestIsTimestamp:
    def test_valid(self) -> None:
        assert is_timestamp("00:01:02.500")
        assert is_timestamp("99:59:59.999")

    def test_minutes_out_of_range(self) -> None:
        assert not is_timestamp("00:60:00.000")

    def test_seconds_out_of_range(self) -> None:
        assert not is_timestamp("00:00:60.000")

    def test_comma_separator_rejected(self) -> None:
        assert not is_timestamp("00:00:01,000")

    def test_short_fields_rejected(self) -> None:
        assert not is_timestamp("0:00:01.000")
        assert not is_timestamp("00:00:01.00")


class TestSplitTimestamp:
    def test_split(self) -> None:
        assert split_timestamp("01:02:03.456") == (1, 2, 3, "456")

    def test_invalid_raises(self) -> None:
        with pytest.raises(FormatError):
            split_timestamp("1:2:3")


class TestSrtTimestamp:
    def test_comma_separator(self) -> None:
        assert to_srt_timestamp("00:01:02.500") == "00:01:02,500"

    def test_back_to_period(self) -> None:
        assert from_srt_timestamp("00:01:02,500") == "00:01:02.500"


class TestLrcTimestamp:
    def test_hours_fold_into_minutes(self) -> None:
        assert to_lrc_timestamp("01:02:03.456") == "62:03.45"

    def test_minutes_wrap_at_one_hundred(self) -> None:
        assert to_lrc_timestamp("02:00:00.000") == "20:00.00"

    def test_centiseconds_truncate(self) -> None:
        assert to_lrc_timestamp("00:00:09.999") == "00:09.99"

    def test_single_digit_minutes_padded(self) -> None:
        assert to_lrc_timestamp("00:05:01.100") == "05:01.10"
