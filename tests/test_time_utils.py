# tests/test_time_utils.py

from __future__ import annotations

from datetime import datetime

import pytest

from taskpulse.tasks.time_utils import (
    FormatError,
    format_remaining,
    from_minutes,
    minute_of_day,
    progress_percent,
    remaining_minutes,
    task_duration,
    to_minutes,
    warning_threshold,
)


def test_to_minutes_parses_hhmm() -> None:
    assert to_minutes("00:00") == 0
    assert to_minutes("09:30") == 570
    assert to_minutes("9:05") == 545
    assert to_minutes(" 23:59 ") == 1439


@pytest.mark.parametrize("raw", ["", "0930", "24:00", "12:60", "ab:cd", "09:00:00", "9:00 pm", "-1:00"])
def test_to_minutes_rejects_malformed(raw: str) -> None:
    with pytest.raises(FormatError):
        to_minutes(raw)


def test_format_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        to_minutes("noon")


def test_from_minutes_inverts_to_minutes() -> None:
    for hhmm in ("00:00", "07:05", "12:30", "23:59"):
        assert from_minutes(to_minutes(hhmm)) == hhmm
    with pytest.raises(FormatError):
        from_minutes(1440)


def test_minute_of_day() -> None:
    assert minute_of_day(datetime(2026, 1, 1, 10, 40, 59)) == 640


def test_remaining_minutes_never_negative() -> None:
    assert remaining_minutes(600, 640) == 40
    assert remaining_minutes(640, 640) == 0
    assert remaining_minutes(700, 640) == 0


def test_format_remaining() -> None:
    assert format_remaining(0) == "0m"
    assert format_remaining(-5) == "0m"
    assert format_remaining(45) == "45m"
    assert format_remaining(60) == "1h 0m"
    assert format_remaining(135) == "2h 15m"


def test_warning_threshold_tiers() -> None:
    assert warning_threshold(360) == 30
    assert warning_threshold(359) == 10
    assert warning_threshold(60) == 10
    assert warning_threshold(59) == 5
    assert warning_threshold(30) == 5
    assert warning_threshold(29) == 2
    assert warning_threshold(5) == 1
    assert warning_threshold(0) == 1


def test_inverted_window_has_negative_duration() -> None:
    assert task_duration(600, 540) == -60
    assert warning_threshold(task_duration(600, 540)) == 1


def test_progress_percent_is_clamped() -> None:
    assert progress_percent(550, 540, 560) == 50.0
    assert progress_percent(500, 540, 560) == 0.0
    assert progress_percent(600, 540, 560) == 100.0
    assert progress_percent(550, 560, 540) == 0.0
