import logging

from .api_client import maps_url
from .departure_calculator import DepartureTimeCalculator
from .errors import ErrorCode, StoreUnavailableError
from .preferences import validate_preferences
from .time_converter import localize, to_utc, to_utc_deadline
from .wake_policy import plan_departure


class PlanningOutcome:
    """Either a departure plan or the reason one could not be produced."""

    def __init__(self, plan=None, reason=None, message=None, venue=None):
        self.plan = plan
        self.reason = reason
        self.message = message
        self.venue = venue

    @property
    def ok(self):
        return self.plan is not None

    def to_dict(self):
        if not self.ok:
            return {"ok": False, "reason": self.reason.value, "message": self.message}
        result = {"ok": True, **self.plan.to_dict()}
        if self.venue is not None:
            result["venue"] = self.venue.to_dict()
        return result

    def __repr__(self):
        if self.ok:
            return f"PlanningOutcome({self.plan})"
        return f"PlanningOutcome({self.reason.value}: {self.message})"


class TravelPlanner:
    def __init__(self, resolver, calculator=None):
        """
        Initialize the TravelPlanner with a shared VenueResolver and a DepartureTimeCalculator.
        """
        self.resolver = resolver
        self.calculator = calculator or DepartureTimeCalculator()

    def plan(self, event, prefs):
        """
        Plans the trip from home to an event.

        Returns a PlanningOutcome. Unknown venues, missing preferences and an
        unreachable venue store come back as reasons rather than exceptions;
        routing failures still produce a plan flagged as estimated.
        """
        problems = validate_preferences(prefs)
        if problems:
            logging.info(f"Cannot plan travel for {event}: {problems}")
            return PlanningOutcome(reason=ErrorCode.INCOMPLETE_INPUT, message="; ".join(problems))

        try:
            venue = self.resolver.resolve(event.venue_name, event.league)
        except StoreUnavailableError as e:
            return PlanningOutcome(reason=e.code, message=e.message)
        except ValueError as e:
            # Unknown league tag on the event
            return PlanningOutcome(reason=ErrorCode.INCOMPLETE_INPUT, message=str(e))

        if venue is None:
            return PlanningOutcome(
                reason=ErrorCode.VENUE_NOT_FOUND,
                message="Could not find an address for that venue. Please provide the rink address.",
            )

        deadline = to_utc_deadline(
            event.local_date, event.local_time, event.timezone, prefs.arrival_buffer_minutes
        )
        logging.info(f"Planning trip to {venue.canonical_name}, arrive by {deadline.isoformat()}")

        estimate = self.calculator.converge(prefs.home_address, venue.address, deadline)
        event_start = localize(event.local_date, event.local_time, event.timezone)
        plan = plan_departure(
            estimate, prefs, event_start, event.timezone,
            maps_url=maps_url(prefs.home_address, venue.address),
        )

        logging.info("Planned departure: %s", plan)
        return PlanningOutcome(plan=plan, venue=venue)

    def plan_many(self, events, prefs):
        """Plans every event in start order, returning (event, outcome) pairs."""
        ordered = sorted(events, key=lambda e: to_utc(e.local_date, e.local_time, e.timezone))
        return [(event, self.plan(event, prefs)) for event in ordered]
