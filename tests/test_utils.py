from datetime import date, datetime

import pytest

from services.utils import (
    InvalidTimeError,
    best_name_match,
    display_time,
    meeting_window,
    normalize_time,
    parse_date,
    strip_html,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("5pm", "17:00"),
        ("5 PM", "17:00"),
        ("6:30 pm", "18:30"),
        ("12am", "00:00"),
        ("12pm", "12:00"),
        ("9:05am", "09:05"),
        ("17:00", "17:00"),
        ("7:15", "07:15"),
    ],
)
def test_normalize_time(raw, expected):
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["", "noon", "25:00", "13pm", "5:75pm", "tomorrow", "5 p.m.", "5.30pm"])
def test_normalize_time_rejects_garbage(raw):
    with pytest.raises(InvalidTimeError):
        normalize_time(raw)


def test_meeting_window_defaults_to_thirty_minutes():
    start, end = meeting_window(date(2026, 11, 2), "5pm")
    assert start == datetime(2026, 11, 2, 17, 0)
    assert end == datetime(2026, 11, 2, 17, 30)


def test_meeting_window_replaces_end_before_start():
    start, end = meeting_window(date(2026, 11, 2), "17:00", end=datetime(2026, 11, 2, 16, 0))
    assert end == datetime(2026, 11, 2, 17, 30)


def test_meeting_window_keeps_valid_end():
    _, end = meeting_window(date(2026, 11, 2), "17:00", end=datetime(2026, 11, 2, 18, 0))
    assert end == datetime(2026, 11, 2, 18, 0)


def test_parse_date():
    assert parse_date("2026-03-04") == date(2026, 3, 4)
    assert parse_date(None, default=date(2020, 1, 1)) == date(2020, 1, 1)
    with pytest.raises(InvalidTimeError):
        parse_date("next friday")


def test_display_time():
    assert display_time(datetime(2026, 1, 1, 17, 0)) == "5:00 pm"
    assert display_time(datetime(2026, 1, 1, 9, 30)) == "9:30 am"


def test_best_name_match_prefers_exact_then_prefix_then_substring():
    names = ["Advanced Math", "Math 101", "Math"]
    assert best_name_match(names, "math") == "Math"
    assert best_name_match(names[:2], "math") == "Math 101"
    assert best_name_match(names[:1], "math") == "Advanced Math"
    assert best_name_match(names, "physics") is None
    assert best_name_match(names, "") is None


def test_strip_html():
    assert strip_html("<p>Hello&nbsp;<b>team</b></p>\n<div>bye</div>") == "Hello team bye"
    assert strip_html("") == ""
    assert len(strip_html("<p>" + "x" * 500 + "</p>")) == 200
