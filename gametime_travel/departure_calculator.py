"""
Departure time convergence.

Drive duration depends on departure time (traffic) and departure time depends
on drive duration (deadline minus duration). The calculator solves this
fixed point by repeatedly asking the routing provider for the duration of a
departure at the current candidate time:

    guess = seed
    loop:
        candidate = deadline - guess
        predicted = provider(candidate)
        if |predicted - guess| <= threshold: converged
        guess = predicted

The loop stops after ``1 + max_extra_iterations`` provider queries. If the
provider fails twice in a row the run ends with a distance-based fallback
estimate instead of raising.
"""

import datetime
import logging
from enum import Enum

from .api_client import APIClient, haversine_distance
from .config import Config
from .errors import ErrorCode, IncompleteInputError, RoutingError


class EstimateStatus(Enum):
    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"
    FALLBACK = "fallback"


FALLBACK_DISCLAIMER = "Estimated travel time (traffic data unavailable)."
APPROXIMATE_DISCLAIMER = "Travel time is approximate; traffic predictions did not settle."


class TravelTimeEstimate:
    def __init__(self, venue_address, arrival_deadline_utc, departure_utc, duration_minutes,
                 iterations, status, distance_meters=None, estimate_method=None, reason=None):
        self.venue_address = venue_address
        self.arrival_deadline_utc = arrival_deadline_utc
        self.departure_utc = departure_utc
        self.duration_minutes = duration_minutes
        self.iterations = iterations
        self.status = status
        self.distance_meters = distance_meters
        self.estimate_method = estimate_method
        self.reason = reason

    @property
    def converged(self):
        return self.status is EstimateStatus.CONVERGED

    @property
    def is_authoritative(self):
        return self.status is not EstimateStatus.FALLBACK

    @property
    def disclaimer(self):
        if self.status is EstimateStatus.FALLBACK:
            return FALLBACK_DISCLAIMER
        if self.status is EstimateStatus.NOT_CONVERGED:
            return APPROXIMATE_DISCLAIMER
        return None

    def __repr__(self):
        return (f"TravelTimeEstimate({self.status.value}, depart {self.departure_utc.isoformat()}, "
                f"{self.duration_minutes:.1f} min, {self.iterations} iterations)")


class DepartureTimeCalculator:
    """
    Converges on a departure time for a fixed arrival deadline.

    Args:
        client: Routing client exposing ``compute_route`` and ``geocode_address``.
        seed_minutes: Initial drive duration guess.
        threshold_minutes: Largest accepted gap between guess and prediction.
        max_extra_iterations: Queries allowed after the seed query.
        traffic_model: Routes API traffic model sent with every query.
    """

    def __init__(self, client=None, seed_minutes=None, threshold_minutes=None,
                 max_extra_iterations=None, traffic_model=None,
                 fallback_speed_kmh=None, circuity_factor=None):
        self.client = client or APIClient()
        self.seed_minutes = seed_minutes if seed_minutes is not None else Config.SEED_DURATION_MINUTES
        self.threshold_minutes = (threshold_minutes if threshold_minutes is not None
                                  else Config.CONVERGENCE_THRESHOLD_MINUTES)
        self.max_extra_iterations = (max_extra_iterations if max_extra_iterations is not None
                                     else Config.MAX_EXTRA_ITERATIONS)
        self.traffic_model = traffic_model or Config.TRAFFIC_MODEL
        self.fallback_speed_kmh = fallback_speed_kmh or Config.FALLBACK_SPEED_KMH
        self.circuity_factor = circuity_factor or Config.ROAD_CIRCUITY_FACTOR

    def _query(self, origin, destination, departure_utc):
        """Ask the provider once, retrying a single time on failure."""
        try:
            return self.client.compute_route(origin, destination, departure_utc, self.traffic_model)
        except RoutingError as e:
            logging.warning(f"Routing query failed ({e.code.value}), retrying once")
        return self.client.compute_route(origin, destination, departure_utc, self.traffic_model)

    def converge(self, origin, destination, arrival_deadline_utc):
        """
        Find a departure instant whose predicted drive duration lands on the deadline.

        Returns a TravelTimeEstimate tagged CONVERGED, NOT_CONVERGED or FALLBACK.
        """
        if not origin or not origin.strip():
            raise IncompleteInputError("Origin address is required")
        if not destination or not destination.strip():
            raise IncompleteInputError("Destination address is required")

        max_queries = 1 + max(0, self.max_extra_iterations)
        guess = self.seed_minutes
        iterations = 0
        last_distance = None
        last_predicted = None

        while True:
            candidate = arrival_deadline_utc - datetime.timedelta(minutes=guess)
            try:
                result = self._query(origin, destination, candidate)
            except RoutingError as e:
                logging.error(f"Routing unavailable after retry: {e}")
                return self._fallback(origin, destination, arrival_deadline_utc, iterations,
                                      last_distance, last_predicted)

            iterations += 1
            predicted = result.duration_minutes
            last_predicted = predicted
            if result.distance_meters is not None:
                last_distance = result.distance_meters
            delta = abs(predicted - guess)
            logging.info(f"Iteration {iterations}: guess {guess:.1f} min, predicted {predicted:.1f} min (delta {delta:.1f})")

            if delta <= self.threshold_minutes:
                return TravelTimeEstimate(
                    venue_address=destination,
                    arrival_deadline_utc=arrival_deadline_utc,
                    departure_utc=candidate,
                    duration_minutes=predicted,
                    iterations=iterations,
                    status=EstimateStatus.CONVERGED,
                    distance_meters=last_distance,
                )

            if iterations >= max_queries:
                logging.warning(f"Departure did not converge after {iterations} queries, using last prediction")
                return TravelTimeEstimate(
                    venue_address=destination,
                    arrival_deadline_utc=arrival_deadline_utc,
                    departure_utc=arrival_deadline_utc - datetime.timedelta(minutes=predicted),
                    duration_minutes=predicted,
                    iterations=iterations,
                    status=EstimateStatus.NOT_CONVERGED,
                    distance_meters=last_distance,
                )

            guess = predicted

    def _fallback(self, origin, destination, arrival_deadline_utc, iterations, distance_meters,
                  last_predicted=None):
        """
        Distance over an assumed average speed, or the seed when no distance is known.

        Never shorter than a traffic prediction already received during this run.
        """
        method = "distance"
        if distance_meters is None:
            distance_meters = self._straight_line_meters(origin, destination)
            method = "straight_line"

        if distance_meters is None:
            minutes = self.seed_minutes
            method = "default"
        else:
            minutes = (distance_meters / 1000) / self.fallback_speed_kmh * 60

        if last_predicted is not None and last_predicted > minutes:
            minutes = last_predicted

        logging.warning(f"Using {method} fallback estimate of {minutes:.1f} min")
        return TravelTimeEstimate(
            venue_address=destination,
            arrival_deadline_utc=arrival_deadline_utc,
            departure_utc=arrival_deadline_utc - datetime.timedelta(minutes=minutes),
            duration_minutes=minutes,
            iterations=iterations,
            status=EstimateStatus.FALLBACK,
            distance_meters=distance_meters,
            estimate_method=method,
            reason=ErrorCode.ROUTING_UNAVAILABLE,
        )

    def _straight_line_meters(self, origin, destination):
        geocode = getattr(self.client, "geocode_address", None)
        if geocode is None:
            return None
        start = geocode(origin)
        end = geocode(destination)
        if not start or not end:
            return None
        km = haversine_distance(start[0], start[1], end[0], end[1])
        return km * self.circuity_factor * 1000
