"""Wake-up time and hotel recommendation for a converged departure."""

import datetime

from .time_converter import format_12_hour, format_full_datetime, localize, to_local_datetime

# Before this hour the user is actually waking up; after it they are only getting ready
WAKE_LABEL_CUTOFF = datetime.time(9, 0)


def is_earlier_than_minimum(wake_local, min_wake_time, event_date):
    """
    True when the wake-up falls before the minimum wake time of the event day.

    Wake-ups on an earlier calendar day always count as earlier. On the event
    day this is a plain clock comparison, so 00:30 is earlier than 06:00.
    """
    if wake_local.date() < event_date:
        return True
    return wake_local.time() < min_wake_time


class DeparturePlan:
    def __init__(self, wake_local, leave_local, arrive_local, event_local, drive_minutes,
                 hotel_recommended, timezone, estimate=None, maps_url=None):
        self.wake_local = wake_local
        self.leave_local = leave_local
        self.arrive_local = arrive_local
        self.event_local = event_local
        self.drive_minutes = drive_minutes
        self.hotel_recommended = hotel_recommended
        self.timezone = timezone
        self.estimate = estimate
        self.maps_url = maps_url

    @property
    def is_estimated(self):
        return self.estimate is not None and not self.estimate.is_authoritative

    @property
    def disclaimer(self):
        return self.estimate.disclaimer if self.estimate is not None else None

    @property
    def wake_label(self):
        if self.wake_local.time() < WAKE_LABEL_CUTOFF:
            return "Wake-up time"
        return "Get ready time"

    def to_dict(self):
        result = {
            "wake_up_time": self.wake_local.isoformat(),
            "departure_time": self.leave_local.isoformat(),
            "arrival_time": self.arrive_local.isoformat(),
            "event_time": self.event_local.isoformat(),
            "wake_label": self.wake_label,
            "display": {
                "wake_up_time": format_12_hour(self.wake_local, self.timezone),
                "departure_time": format_12_hour(self.leave_local, self.timezone),
                "arrival_time": format_12_hour(self.arrive_local, self.timezone),
                "event_time": format_12_hour(self.event_local, self.timezone),
                "event_datetime": format_full_datetime(self.event_local, self.timezone),
            },
            "drive_minutes": round(self.drive_minutes, 1),
            "hotel_recommended": self.hotel_recommended,
            "timezone": self.timezone,
            "is_estimated": self.is_estimated,
        }
        if self.estimate is not None:
            result["status"] = self.estimate.status.value
            result["iterations"] = self.estimate.iterations
            result["distance_meters"] = self.estimate.distance_meters
            if self.estimate.reason is not None:
                result["reason"] = self.estimate.reason.value
        if self.maps_url:
            result["maps_url"] = self.maps_url
        if self.disclaimer:
            result["disclaimer"] = self.disclaimer
        return result

    def __repr__(self):
        return (f"DeparturePlan(wake {self.wake_local.strftime('%H:%M')}, "
                f"leave {self.leave_local.strftime('%H:%M')}, hotel={self.hotel_recommended})")


def plan_departure(estimate, prefs, event_local_start, timezone, maps_url=None):
    """
    Turn a travel estimate into wake/leave/arrive local times.

    ``event_local_start`` is the event's local start, either an aware
    datetime or a naive one on the venue's wall clock.
    """
    if event_local_start.tzinfo is None:
        event_local_start = localize(event_local_start.date(), event_local_start.time(), timezone)
    else:
        event_local_start = to_local_datetime(event_local_start, timezone)

    leave_local = to_local_datetime(estimate.departure_utc, timezone)
    wake_local = to_local_datetime(
        estimate.departure_utc - datetime.timedelta(minutes=prefs.get_ready_minutes), timezone
    )
    arrive_local = to_local_datetime(estimate.arrival_deadline_utc, timezone)

    hotel = (prefs.min_wake_time is not None
             and is_earlier_than_minimum(wake_local, prefs.min_wake_time, event_local_start.date()))

    return DeparturePlan(
        wake_local=wake_local,
        leave_local=leave_local,
        arrive_local=arrive_local,
        event_local=event_local_start,
        drive_minutes=estimate.duration_minutes,
        hotel_recommended=hotel,
        timezone=timezone,
        estimate=estimate,
        maps_url=maps_url,
    )
