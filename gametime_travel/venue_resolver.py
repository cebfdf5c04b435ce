"""
Venue name resolution.

Maps noisy venue names from schedules ("Toyota Sports Performance Center",
"TSPC - Rink 2", "toyota  sports center") onto canonical venues. All
venues are held in an in-process index that is rebuilt from the venue store
when it is older than the TTL or when an administrator asks for a refresh.

The index is immutable once built. A rebuild constructs a new index off to
the side and publishes it with a single attribute assignment, so readers see
either the old index or the new one and never a partially populated one.
"""

import datetime
import logging
import re
import threading
import time

from .config import Config
from .errors import IncompleteInputError, StoreUnavailableError
from .venue import League

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name):
    """Trim, lowercase and collapse internal whitespace."""
    if not name:
        return ""
    return _WHITESPACE.sub(" ", name).strip().lower()


class LeagueIndex:
    """Lookup tables for the venues of a single league."""

    def __init__(self, venues):
        names = {}
        aliases = {}
        candidates = []
        for venue in venues:
            key = normalize_name(venue.canonical_name)
            # An empty key would be a substring of every query
            if key:
                names.setdefault(key, venue)
                candidates.append((key, venue))
            for alias in venue.aliases:
                alias_key = normalize_name(alias)
                if not alias_key:
                    continue
                # First venue to claim an alias keeps it
                aliases.setdefault(alias_key, venue)
                candidates.append((alias_key, venue))
        self.names = names
        self.aliases = aliases
        self.candidates = tuple(candidates)


class VenueIndex:
    """Immutable snapshot of every venue, grouped by league."""

    def __init__(self, venues, loaded_at):
        grouped = {}
        for venue in venues:
            grouped.setdefault(venue.league, []).append(venue)
        self._leagues = {league: LeagueIndex(items) for league, items in grouped.items()}
        self.loaded_at = loaded_at
        self.venue_count = len(venues)
        self.alias_count = sum(len(v.aliases) for v in venues)

    def for_league(self, league):
        return self._leagues.get(league)


def match_canonical_name(query, index):
    """Exact match on a canonical venue name."""
    return index.names.get(query)


def match_alias(query, index):
    """Exact match on an alias."""
    return index.aliases.get(query)


def match_substring(query, index):
    """
    Containment in either direction between the query and every canonical
    name and alias. The longest matching key wins; ties go to the venue
    that was loaded first.
    """
    best = None
    best_length = -1
    for key, venue in index.candidates:
        if key in query or query in key:
            if len(key) > best_length:
                best = venue
                best_length = len(key)
    return best


MATCH_PIPELINE = (match_canonical_name, match_alias, match_substring)


class RefreshResult:
    def __init__(self, venue_count, alias_count, refreshed_at):
        self.venue_count = venue_count
        self.alias_count = alias_count
        self.refreshed_at = refreshed_at

    def to_dict(self):
        return {
            "venue_count": self.venue_count,
            "alias_count": self.alias_count,
            "refreshed_at": self.refreshed_at.isoformat(),
        }

    def __repr__(self):
        return f"RefreshResult({self.venue_count} venues, {self.alias_count} aliases)"


class VenueResolver:
    """
    Resolves venue names to canonical venues for one league at a time.

    Construct one per process and pass it to whatever needs lookups.

    Args:
        store: A VenueStore to load venues from.
        ttl_seconds: Maximum index age before a lookup triggers a rebuild.
        clock: Callable returning the current time in seconds.
        retry_seconds: After a failed rebuild, how long lookups keep serving
            the stale index before asking the store again.
    """

    def __init__(self, store, ttl_seconds=None, clock=time.time, retry_seconds=None):
        self.store = store
        if ttl_seconds is None:
            ttl_seconds = Config.VENUE_CACHE_TTL_HOURS * 3600
        self.ttl_seconds = ttl_seconds
        self.retry_seconds = (retry_seconds if retry_seconds is not None
                              else Config.VENUE_STORE_RETRY_SECONDS)
        self.clock = clock
        self._index = None
        self._retry_after = None
        self._refresh_lock = threading.Lock()

    def _is_stale(self, index):
        return self.clock() - index.loaded_at > self.ttl_seconds

    def _rebuild(self):
        venues = self.store.load_venues()
        index = VenueIndex(venues, loaded_at=self.clock())
        self._index = index
        self._retry_after = None
        logging.info(
            "Venue cache refreshed: %d venues, %d aliases", index.venue_count, index.alias_count
        )
        return index

    def _current_index(self):
        index = self._index
        if index is not None and not self._is_stale(index):
            return index

        if index is None:
            self._refresh_lock.acquire()
        else:
            if self._retry_after is not None and self.clock() < self._retry_after:
                return index
            # A stale index is served rather than waiting on a rebuild already in progress
            if not self._refresh_lock.acquire(blocking=False):
                return index

        try:
            # Another thread may have rebuilt while we waited
            index = self._index
            if index is not None and not self._is_stale(index):
                return index
            try:
                return self._rebuild()
            except StoreUnavailableError as e:
                if index is None:
                    logging.error("Venue store unavailable and no cached venues: %s", e.detail)
                    raise
                self._retry_after = self.clock() + self.retry_seconds
                logging.warning(
                    "Venue store unavailable, serving stale cache for %ds: %s", self.retry_seconds, e.detail
                )
                return index
        finally:
            self._refresh_lock.release()

    def resolve(self, name, league):
        """
        Resolve a venue name within a league.

        Returns the matching Venue, or None when nothing matches. Raises
        StoreUnavailableError only when the store is down and no index has
        ever been loaded.
        """
        query = normalize_name(name)
        if not query:
            return None
        league = League.parse(league)

        league_index = self._current_index().for_league(league)
        if league_index is None:
            logging.info(f"No venues loaded for league {league.value}")
            return None

        for stage in MATCH_PIPELINE:
            venue = stage(query, league_index)
            if venue is not None:
                logging.debug(f"Resolved '{query}' to {venue} via {stage.__name__}")
                return venue

        logging.info(f"No venue match in league {league.value}")
        return None

    def refresh_cache(self):
        """
        Rebuild the index immediately, regardless of its age.

        A failing store raises StoreUnavailableError and leaves the current
        index in place.
        """
        with self._refresh_lock:
            index = self._rebuild()
        return RefreshResult(
            venue_count=index.venue_count,
            alias_count=index.alias_count,
            refreshed_at=datetime.datetime.now(datetime.timezone.utc),
        )

    def stats(self):
        index = self._index
        if index is None:
            return {"loaded": False, "venue_count": 0, "alias_count": 0, "age_seconds": None}
        return {
            "loaded": True,
            "venue_count": index.venue_count,
            "alias_count": index.alias_count,
            "age_seconds": self.clock() - index.loaded_at,
        }


def resolve_venue_request(resolver, payload):
    """Handle a ``{"venue_name", "league"}`` request, returning ``{"venue": ...}``."""
    venue_name = (payload or {}).get("venue_name")
    if not venue_name:
        raise IncompleteInputError("Missing required field: venue_name")
    league = payload.get("league") or Config.DEFAULT_LEAGUE
    venue = resolver.resolve(venue_name, league)
    return {"venue": venue.to_dict() if venue else None}
