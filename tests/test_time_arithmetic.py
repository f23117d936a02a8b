"""
Tests for 12-hour time label arithmetic.
"""

from __future__ import annotations

import pytest

from salon_scheduling.application.exceptions import ParseError
from salon_scheduling.application.utils.time_arithmetic import (
    MINUTES_PER_DAY,
    add_duration,
    from_24h,
    hour_of,
    normalize_label,
    to_24h,
    to_label,
    to_minutes,
)


def test_label_round_trip_for_every_minute_of_the_day():
    """Every canonical label parses back to itself."""
    for minutes in range(MINUTES_PER_DAY):
        label = to_label(minutes)
        assert to_minutes(label) == minutes
        assert to_label(to_minutes(label)) == label


def test_noon_and_midnight():
    assert to_minutes("12:00 AM") == 0
    assert to_minutes("12:00 PM") == 720
    assert to_minutes("12:30 PM") == 750
    assert to_label(0) == "12:00 AM"
    assert to_label(720) == "12:00 PM"


def test_padding_and_case_are_ignored():
    """Zero-padded and lowercase labels parse to the same minute."""
    assert to_minutes("09:30 AM") == to_minutes("9:30 AM") == to_minutes("9:30 am") == 570
    assert normalize_label("09:30 AM") == "9:30 AM"
    assert normalize_label(" 02:00 pm ") == "2:00 PM"


def test_add_duration_examples():
    assert add_duration("10:00 AM", 60) == "11:00 AM"
    assert add_duration("9:00 AM", 45) == "9:45 AM"
    assert add_duration("11:30 AM", 90) == "1:00 PM"


def test_add_duration_wraps_past_midnight():
    """An end time after midnight wraps onto the next day's clock."""
    assert add_duration("11:30 PM", 45) == "12:15 AM"


def test_add_duration_is_monotonic_within_a_day():
    start = to_minutes("9:00 AM")
    for duration in range(1, MINUTES_PER_DAY - start):
        end = add_duration("9:00 AM", duration)
        assert to_minutes(end) == start + duration


@pytest.mark.parametrize("duration", [0, -30, 1.5, True, "60"])
def test_add_duration_rejects_non_positive_or_non_integer(duration):
    with pytest.raises(ValueError):
        add_duration("10:00 AM", duration)


@pytest.mark.parametrize(
    "label",
    ["", "10:00", "25:00 PM", "0:30 AM", "13:00 PM", "10:60 AM", "10-00 AM", "ten AM", None],
)
def test_malformed_labels_raise_parse_error(label):
    with pytest.raises(ParseError):
        to_minutes(label)


def test_parse_error_is_a_value_error():
    with pytest.raises(ValueError):
        to_minutes("not a time")


def test_hour_of():
    assert hour_of("9:30 AM") == 9
    assert hour_of("12:00 PM") == 12
    assert hour_of("5:00 PM") == 17


def test_24_hour_conversion():
    """The salon backend speaks "HH:MM[:SS]"."""
    assert to_24h("2:00 PM") == "14:00"
    assert to_24h("9:05 AM") == "09:05"
    assert from_24h("14:00") == "2:00 PM"
    assert from_24h("09:30:00") == "9:30 AM"
    with pytest.raises(ParseError):
        from_24h("24:00")
