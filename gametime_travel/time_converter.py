"""
Timezone conversion between a venue's local wall clock and UTC.

DST rules:
    * An ambiguous local time (the repeated hour when clocks fall back)
      resolves to the earlier of the two instants.
    * A nonexistent local time (the skipped hour when clocks spring forward)
      moves forward to the first valid local minute after the gap, so 02:30
      on a US spring-forward day becomes 03:00.
"""

import datetime
import logging

import pytz

from .config import Config

# Map common timezone abbreviations to IANA timezone identifiers
TIMEZONE_ABBREVIATIONS = {
    'PT': 'America/Los_Angeles',
    'PST': 'America/Los_Angeles',
    'PDT': 'America/Los_Angeles',
    'MT': 'America/Denver',
    'MST': 'America/Denver',
    'MDT': 'America/Denver',
    'CT': 'America/Chicago',
    'CST': 'America/Chicago',
    'CDT': 'America/Chicago',
    'ET': 'America/New_York',
    'EST': 'America/New_York',
    'EDT': 'America/New_York',
    'UTC': 'UTC',
    'GMT': 'UTC',
}

# Longest real-world gap is a skipped calendar day
_MAX_GAP = datetime.timedelta(hours=48)


def normalize_timezone(value):
    """Return an IANA timezone name for an IANA name or a known abbreviation."""
    candidate = (value or '').strip()
    if not candidate:
        return Config.DEFAULT_TIMEZONE

    mapped = TIMEZONE_ABBREVIATIONS.get(candidate.upper())
    if mapped:
        return mapped

    try:
        pytz.timezone(candidate)
        return candidate
    except pytz.exceptions.UnknownTimeZoneError:
        logging.warning(f"Unsupported timezone '{candidate}', falling back to {Config.DEFAULT_TIMEZONE}")
        return Config.DEFAULT_TIMEZONE


def _get_tz(timezone):
    if isinstance(timezone, datetime.tzinfo):
        return timezone
    return pytz.timezone(normalize_timezone(timezone))


def localize(date, local_time, timezone):
    """Attach a timezone to a local date and time, resolving DST edge cases."""
    tz = _get_tz(timezone)
    naive = datetime.datetime.combine(date, local_time)

    try:
        return tz.localize(naive, is_dst=None)
    except pytz.exceptions.AmbiguousTimeError:
        first = tz.localize(naive, is_dst=True)
        second = tz.localize(naive, is_dst=False)
        earlier = min(first, second, key=lambda dt: dt.astimezone(pytz.utc))
        logging.debug(f"Ambiguous local time {naive} in {tz.zone}, using {earlier.isoformat()}")
        return earlier
    except pytz.exceptions.NonExistentTimeError:
        candidate = naive.replace(second=0, microsecond=0)
        limit = naive + _MAX_GAP
        while candidate <= limit:
            candidate += datetime.timedelta(minutes=1)
            try:
                shifted = tz.localize(candidate, is_dst=None)
            except pytz.exceptions.NonExistentTimeError:
                continue
            logging.debug(f"Nonexistent local time {naive} in {tz.zone}, shifted to {shifted.isoformat()}")
            return shifted
        raise ValueError(f"Could not find a valid local time after {naive} in {tz.zone}")


def to_utc(date, local_time, timezone):
    return localize(date, local_time, timezone).astimezone(pytz.utc)


def to_utc_deadline(date, local_time, timezone, buffer_minutes=0):
    """
    The UTC instant a traveller must arrive by: event start minus the
    arrival buffer.
    """
    if buffer_minutes < 0:
        raise ValueError("buffer_minutes must be non-negative")
    start = to_utc(date, local_time, timezone)
    return start - datetime.timedelta(minutes=buffer_minutes)


def to_local_datetime(instant, timezone):
    if instant.tzinfo is None:
        # Naive instants are treated as UTC
        instant = pytz.utc.localize(instant)
    return instant.astimezone(_get_tz(timezone))


def to_local(instant, timezone):
    """Return the (date, time) of an instant on the wall clock of a timezone."""
    local = to_local_datetime(instant, timezone)
    return local.date(), local.time()


def format_12_hour(instant, timezone):
    """Format as '7:00 AM PDT'."""
    local = to_local_datetime(instant, timezone)
    hour = local.strftime("%I").lstrip("0") or "12"
    return f"{hour}:{local.strftime('%M %p')} {local.tzname()}"


def format_full_datetime(instant, timezone):
    """Format as 'Sunday, October 05 at 7:00 AM PDT'."""
    local = to_local_datetime(instant, timezone)
    return f"{local.strftime('%A, %B %d')} at {format_12_hour(instant, timezone)}"
