from datetime import datetime, time, timedelta, timezone

import pytest

from attendance_sync.common.datetime_utils import (
    format_duration_text,
    format_minutes,
    parse_hhmm,
    parse_iso_duration,
    parse_iso_instant,
    parse_time_of_day,
    to_local,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("9:00 AM", 540),
        ("  9:00   am ", 540),
        ("09:00 Am", 540),
        ("12:00 AM", 0),
        ("12:30 PM", 750),
        ("5:05 PM", 1025),
        ("17:05", 1025),
        ("9:00AM", 540),
    ],
)
def test_parse_time_of_day_accepts_clock_formats(text, expected):
    assert parse_time_of_day(text) == expected


@pytest.mark.parametrize("text", ["", None, "   ", "abc", "9:xx AM", "25:00", "9:75 PM", "9 AM", "13:00 PM"])
def test_parse_time_of_day_malformed_is_zero(text):
    assert parse_time_of_day(text) == 0


def test_parse_time_of_day_matches_strftime_output():
    for minutes in (5, 59, 540, 719, 720, 725, 1025, 1439):
        formatted = (datetime(2024, 1, 1) + timedelta(minutes=minutes)).strftime("%I:%M %p")
        assert parse_time_of_day(formatted) == minutes
        assert parse_time_of_day(f"  {formatted.lower()}  ") == minutes


def test_format_and_parse_hhmm():
    assert format_minutes(485) == "08:05"
    assert format_minutes(0) == "00:00"
    assert parse_hhmm("08:05") == 485
    assert parse_hhmm("") == 0
    assert parse_hhmm("n/a") == 0


def test_parse_iso_duration():
    assert parse_iso_duration("PT1H5M30S") == 3930
    assert parse_iso_duration("PT45M") == 2700
    assert parse_iso_duration("P1DT2H") == 93600
    assert parse_iso_duration(None) == 0
    assert parse_iso_duration("90 minutes") == 0


def test_format_duration_text():
    assert format_duration_text(3930) == "1h 5m 30s"
    assert format_duration_text(3900) == "1h 5m"
    assert format_duration_text(59) == "59s"
    assert format_duration_text(0) == "0s"


def test_parse_iso_instant_and_to_local():
    instant = parse_iso_instant("2024-01-01T09:00:00Z")
    assert instant == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    ist = timezone(timedelta(hours=5, minutes=30))
    assert to_local(instant, ist) == datetime(2024, 1, 1, 14, 30)
    assert to_local(datetime(2024, 1, 1, 8, 0)) == datetime(2024, 1, 1, 8, 0)

    assert parse_iso_instant("") is None
    assert parse_iso_instant("yesterday") is None
