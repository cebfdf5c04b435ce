"""
GameTime Travel

This module works out when to leave home for a scheduled game. It resolves
schedule venue names to addresses, converges on a departure time using
traffic predictions for that departure, and derives a wake-up time with an
optional hotel recommendation.

Example:
    from gametime_travel import TravelPlanner, VenueResolver, EventOccurrence, UserTravelPreferences
    from gametime_travel.venue_store import store_from_config

    resolver = VenueResolver(store_from_config())
    planner = TravelPlanner(resolver)

    event = EventOccurrence.from_dict({
        "date": "2025-10-05", "time": "07:00", "venue": "Toyota Sports Center",
        "timezone": "America/Los_Angeles", "league": "scaha",
    })
    prefs = UserTravelPreferences(home_address="123 Main St, Los Angeles, CA",
                                  get_ready_minutes=45, arrival_buffer_minutes=60,
                                  min_wake_time="06:00")
    outcome = planner.plan(event, prefs)
"""

from .planner import TravelPlanner, PlanningOutcome
from .venue_resolver import VenueResolver
from .departure_calculator import DepartureTimeCalculator, EstimateStatus
from .event import EventOccurrence
from .preferences import UserTravelPreferences
from .venue import League, Venue

__all__ = [
    'TravelPlanner', 'PlanningOutcome', 'VenueResolver', 'DepartureTimeCalculator',
    'EstimateStatus', 'EventOccurrence', 'UserTravelPreferences', 'League', 'Venue',
]
