import datetime
import re

from .config import Config

_HHMM = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')
WAKE_TIME_FORMAT_ERROR = "Min wake-up time must be in HH:MM format (e.g., 06:00)"


def parse_wake_time(value):
    """Parse an 'HH:MM' 24-hour string. Returns None for blank input."""
    if value is None or isinstance(value, datetime.time):
        return value
    text = value.strip()
    if not text:
        return None
    match = _HHMM.match(text)
    if not match:
        raise ValueError(WAKE_TIME_FORMAT_ERROR)
    return datetime.time(int(match.group(1)), int(match.group(2)))


class UserTravelPreferences:
    """
    Per-request travel preferences. Nothing here is persisted.

    A missing home address disables travel calculations.
    """

    def __init__(self, home_address=None, get_ready_minutes=None,
                 arrival_buffer_minutes=None, min_wake_time=None):
        self.home_address = home_address.strip() if home_address else None
        self.get_ready_minutes = (get_ready_minutes if get_ready_minutes is not None
                                  else Config.DEFAULT_GET_READY_MINUTES)
        self.arrival_buffer_minutes = (arrival_buffer_minutes if arrival_buffer_minutes is not None
                                       else Config.DEFAULT_ARRIVAL_BUFFER_MINUTES)
        try:
            self.min_wake_time = parse_wake_time(min_wake_time)
        except ValueError:
            # Kept as given and reported by validate_preferences
            self.min_wake_time = min_wake_time

    @classmethod
    def from_dict(cls, data):
        return cls(
            home_address=data.get("home_address") or data.get("homeAddress"),
            get_ready_minutes=data.get("get_ready_minutes", data.get("prepTimeMinutes")),
            arrival_buffer_minutes=data.get("arrival_buffer_minutes", data.get("arrivalBufferMinutes")),
            min_wake_time=data.get("min_wake_time", data.get("minWakeUpTime")),
        )

    def __repr__(self):
        return (f"UserTravelPreferences(get_ready={self.get_ready_minutes}, "
                f"buffer={self.arrival_buffer_minutes}, min_wake={self.min_wake_time})")


def validate_preferences(prefs):
    """Return a list of validation error messages (empty if valid)."""
    errors = []

    if not prefs.home_address:
        errors.append("Home address is required")

    if not isinstance(prefs.get_ready_minutes, int) or not 0 <= prefs.get_ready_minutes <= 240:
        errors.append("Prep time must be between 0 and 240 minutes")

    if not isinstance(prefs.arrival_buffer_minutes, int) or not 0 <= prefs.arrival_buffer_minutes <= 120:
        errors.append("Arrival buffer must be between 0 and 120 minutes")

    if prefs.min_wake_time is not None and not isinstance(prefs.min_wake_time, datetime.time):
        errors.append(WAKE_TIME_FORMAT_ERROR)

    return errors
