import datetime
import pytest
from gametime_travel.event import EventOccurrence
from gametime_travel.preferences import UserTravelPreferences, validate_preferences, parse_wake_time


def test_from_dict_parses_date_time_and_timezone():
    e = EventOccurrence.from_dict({
        "date": "2025-10-05", "time": "7:00 AM", "venue": "TSPC", "timezone": "PT", "home_away": "away",
    })
    assert e.local_date == datetime.date(2025, 10, 5)
    assert e.local_time == datetime.time(7, 0)
    assert e.timezone == "America/Los_Angeles"
    assert e.is_home is False
    assert e.league == "scaha"


def test_from_dict_invalid_time_raises():
    with pytest.raises(ValueError):
        EventOccurrence.from_dict({"date": "2025-10-05", "time": "notatime", "venue": "TSPC"})
    with pytest.raises(ValueError):
        EventOccurrence.from_dict({"date": "10/05/2025", "time": "07:00", "venue": "TSPC"})


def test_to_dict_roundtrip():
    data = {
        "summary": "Jr. Kings (1) vs Ducks",
        "date": "2025-10-05",
        "time": "18:30",
        "venue": "Great Park Ice",
        "timezone": "America/Los_Angeles",
        "home_away": "home",
        "league": "pghl",
    }
    event = EventOccurrence.from_dict(data)
    assert event.to_dict() == data


def test_preferences_defaults_and_wake_parsing():
    prefs = UserTravelPreferences(home_address="  1 Home St ", min_wake_time="06:00")
    assert prefs.home_address == "1 Home St"
    assert prefs.get_ready_minutes == 30
    assert prefs.arrival_buffer_minutes == 60
    assert prefs.min_wake_time == datetime.time(6, 0)
    assert parse_wake_time("  ") is None


def test_parse_wake_time_rejects_bad_format():
    with pytest.raises(ValueError):
        parse_wake_time("6am")
    with pytest.raises(ValueError):
        parse_wake_time("24:00")


def test_bad_wake_time_is_a_validation_error():
    for value in ["6am", "24:00"]:
        prefs = UserTravelPreferences("1 Home St", min_wake_time=value)
        assert validate_preferences(prefs) == ["Min wake-up time must be in HH:MM format (e.g., 06:00)"]


def test_preferences_from_dict_accepts_camel_case_keys():
    prefs = UserTravelPreferences.from_dict({
        "homeAddress": "1 Home St", "prepTimeMinutes": 20, "arrivalBufferMinutes": 45, "minWakeUpTime": "05:30",
    })
    assert prefs.get_ready_minutes == 20
    assert prefs.arrival_buffer_minutes == 45
    assert prefs.min_wake_time == datetime.time(5, 30)


def test_validate_preferences():
    assert validate_preferences(UserTravelPreferences("1 Home St")) == []
    errors = validate_preferences(UserTravelPreferences(None, get_ready_minutes=300, arrival_buffer_minutes=-1))
    assert "Home address is required" in errors
    assert len(errors) == 3
