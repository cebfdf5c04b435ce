import datetime

import pytest
import pytz

from gametime_travel.time_converter import (
    normalize_timezone, to_utc_deadline, to_local, localize, format_12_hour, format_full_datetime,
)

LA = "America/Los_Angeles"


def utc(*args):
    return datetime.datetime(*args, tzinfo=pytz.utc)


def test_round_trip_outside_transition_days():
    cases = [
        (datetime.date(2025, 1, 15), datetime.time(7, 0), LA),
        (datetime.date(2025, 7, 4), datetime.time(18, 45), LA),
        (datetime.date(2025, 10, 5), datetime.time(6, 0), "America/New_York"),
        (datetime.date(2025, 6, 1), datetime.time(23, 30), "Pacific/Auckland"),
    ]
    for date, time, tz in cases:
        assert to_local(to_utc_deadline(date, time, tz, 0), tz) == (date, time)


def test_deadline_subtracts_buffer():
    deadline = to_utc_deadline(datetime.date(2025, 10, 5), datetime.time(7, 0), LA, 60)
    # 07:00 PDT is 14:00 UTC; one hour earlier
    assert deadline == utc(2025, 10, 5, 13, 0)


def test_deadline_in_standard_time():
    deadline = to_utc_deadline(datetime.date(2025, 12, 6), datetime.time(7, 0), LA, 0)
    assert deadline == utc(2025, 12, 6, 15, 0)


def test_negative_buffer_rejected():
    with pytest.raises(ValueError):
        to_utc_deadline(datetime.date(2025, 12, 6), datetime.time(7, 0), LA, -5)


def test_fall_back_ambiguous_time_uses_earlier_instant():
    # 2025-11-02 01:30 happens twice in Los Angeles; the PDT one comes first
    start = to_utc_deadline(datetime.date(2025, 11, 2), datetime.time(1, 30), LA, 0)
    assert start == utc(2025, 11, 2, 8, 30)
    assert to_local(start, LA) == (datetime.date(2025, 11, 2), datetime.time(1, 30))


def test_spring_forward_gap_moves_to_first_valid_minute():
    # 2025-03-09 02:30 does not exist in Los Angeles
    local = localize(datetime.date(2025, 3, 9), datetime.time(2, 30), LA)
    assert (local.hour, local.minute) == (3, 0)
    assert local.astimezone(pytz.utc) == utc(2025, 3, 9, 10, 0)
    assert to_local(local, LA) == (datetime.date(2025, 3, 9), datetime.time(3, 0))


def test_normalize_timezone_abbreviations_and_fallback():
    assert normalize_timezone("PT") == LA
    assert normalize_timezone(" edt ") == "America/New_York"
    assert normalize_timezone("Europe/London") == "Europe/London"
    assert normalize_timezone("Mars/Olympus_Mons") == LA
    assert normalize_timezone(None) == LA


def test_abbreviation_accepted_by_converter():
    assert (to_utc_deadline(datetime.date(2025, 10, 5), datetime.time(7, 0), "PDT")
            == to_utc_deadline(datetime.date(2025, 10, 5), datetime.time(7, 0), LA))


def test_format_12_hour_includes_zone_abbreviation():
    assert format_12_hour(utc(2025, 10, 5, 14, 0), LA) == "7:00 AM PDT"
    assert format_12_hour(utc(2025, 12, 6, 20, 15), LA) == "12:15 PM PST"


def test_format_full_datetime():
    assert format_full_datetime(utc(2025, 10, 5, 14, 0), LA) == "Sunday, October 05 at 7:00 AM PDT"
