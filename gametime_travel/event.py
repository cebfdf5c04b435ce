from datetime import date, datetime, time
from typing import Dict, Any

from .config import Config
from .time_converter import normalize_timezone


class EventOccurrence:
    def __init__(self, local_date: date, local_time: time, venue_name: str,
                 timezone: str = None, is_home: bool = True, league: str = None,
                 summary: str = "") -> None:
        self.local_date = local_date
        self.local_time = local_time
        self.venue_name = venue_name
        self.timezone = normalize_timezone(timezone)
        self.is_home = is_home
        self.league = league or Config.DEFAULT_LEAGUE
        self.summary = summary

    @classmethod
    def from_dict(cls, event_dict: Dict[str, Any]) -> "EventOccurrence":
        """
        Build an event from a schedule record such as
        {"date": "2025-10-05", "time": "07:00", "venue": "Toyota Center",
         "timezone": "PT", "home_away": "away"}.
        """
        local_date = cls._parse_date(event_dict.get('date'))
        local_time = cls._parse_time(event_dict.get('time'))
        if local_date is None or local_time is None:
            raise ValueError(f"Event is missing a valid date/time: {event_dict}")

        if 'is_home' in event_dict:
            is_home = bool(event_dict['is_home'])
        else:
            is_home = str(event_dict.get('home_away', 'home')).strip().lower() != 'away'

        return cls(
            local_date=local_date,
            local_time=local_time,
            venue_name=event_dict.get('venue') or event_dict.get('venue_name') or '',
            timezone=event_dict.get('timezone'),
            is_home=is_home,
            league=event_dict.get('league'),
            summary=event_dict.get('summary', ''),
        )

    @staticmethod
    def _parse_date(value):
        if isinstance(value, date):
            return value
        if not value:
            return None
        try:
            return date.fromisoformat(value.strip())
        except (ValueError, AttributeError):
            return None

    @staticmethod
    def _parse_time(value):
        """Accept '07:00', '07:00:00', '7:00 AM' or a time object."""
        if isinstance(value, time):
            return value
        if not value:
            return None
        text = value.strip().upper()
        for fmt in ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p"):
            try:
                return datetime.strptime(text, fmt).time()
            except ValueError:
                continue
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "date": self.local_date.isoformat(),
            "time": self.local_time.strftime("%H:%M"),
            "venue": self.venue_name,
            "timezone": self.timezone,
            "home_away": "home" if self.is_home else "away",
            "league": self.league,
        }

    def __str__(self):
        return f"EventOccurrence({self.venue_name}, {self.local_date} {self.local_time}, {self.timezone})"

    def __repr__(self):
        return self.__str__()
