import threading
from types import SimpleNamespace

import pytest

from gametime_travel.errors import IncompleteInputError, StoreUnavailableError
from gametime_travel.venue import League, Venue
from gametime_travel.venue_resolver import (
    VenueResolver, normalize_name, match_substring, LeagueIndex, resolve_venue_request,
)
from gametime_travel.venue_store import InMemoryVenueStore, VenueStore


def make_venues():
    return [
        Venue("v1", "Toyota Sports Performance Center", "555 N Nash St, El Segundo, CA 90245",
              "place-1", "scaha", aliases=["TSPC", "Toyota Sports Center"]),
        Venue("v2", "Great Park Ice", "888 Ridge Valley, Irvine, CA 92618",
              "place-2", "scaha", aliases=["Great Park", "FivePoint Arena"]),
        Venue("v3", "Skating Edge Ice Arena", "23770 S Western Ave, Harbor City, CA 90710",
              "place-3", "scaha", aliases=["Skating Edge"]),
        Venue("v4", "Lake Placid Olympic Center", "2634 Main St, Lake Placid, NY 12946",
              "place-4", "pghl", aliases=["Great Park"]),
    ]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FlakyStore(VenueStore):
    def __init__(self, venues):
        self.venues = venues
        self.fail = False
        self.calls = 0

    def load_venues(self):
        self.calls += 1
        if self.fail:
            raise StoreUnavailableError("connection refused")
        return list(self.venues)


def test_normalize_name_collapses_whitespace():
    assert normalize_name("  Great   PARK\tIce ") == "great park ice"
    assert normalize_name(None) == ""


def test_resolve_canonical_name_ignores_case_and_whitespace():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    for name in ["Great Park Ice", "great park ice", "  GREAT   park  ICE  "]:
        venue = resolver.resolve(name, "scaha")
        assert venue.id == "v2"


def test_resolve_alias():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    assert resolver.resolve("tspc", League.SCAHA).id == "v1"
    assert resolver.resolve("FivePoint Arena", "SCAHA").id == "v2"


def test_shared_alias_is_scoped_to_league():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    assert resolver.resolve("Great Park", "scaha").id == "v2"
    assert resolver.resolve("Great Park", "pghl").id == "v4"


def test_unknown_name_returns_none():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    assert resolver.resolve("Nowhere Ice Palace", "scaha") is None
    assert resolver.resolve("   ", "scaha") is None


def test_league_without_venues_returns_none():
    venues = [v for v in make_venues() if v.league is League.SCAHA]
    resolver = VenueResolver(InMemoryVenueStore(venues))
    assert resolver.resolve("Lake Placid Olympic Center", "pghl") is None


def test_unknown_league_raises_value_error():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    with pytest.raises(ValueError):
        resolver.resolve("Great Park Ice", "nhl")


def test_substring_match_query_contains_alias():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    venue = resolver.resolve("Skating Edge - Rink 2", "scaha")
    assert venue.id == "v3"


def test_substring_match_alias_contains_query():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    venue = resolver.resolve("performance center", "scaha")
    assert venue.id == "v1"


def test_substring_prefers_longest_key():
    venues = [
        Venue("a", "Ice Center", "1 Generic Way", "p-a", "scaha", aliases=["Ice"]),
        Venue("b", "Anaheim Ice", "300 W Lincoln Ave, Anaheim", "p-b", "scaha"),
    ]
    index = LeagueIndex(venues)
    # "ice" and "anaheim ice" both appear in the query; the longer one is more specific
    assert match_substring("anaheim ice rink 1", index).id == "b"


def test_substring_tie_goes_to_first_inserted():
    venues = [
        Venue("a", "East Rink", "1 East St", "p-a", "scaha"),
        Venue("b", "West Rink", "1 West St", "p-b", "scaha"),
    ]
    index = LeagueIndex(venues)
    assert match_substring("east rink west rink", index).id == "a"


def test_cache_is_built_lazily_and_reused():
    store = FlakyStore(make_venues())
    resolver = VenueResolver(store, ttl_seconds=60, clock=FakeClock())
    assert store.calls == 0
    resolver.resolve("TSPC", "scaha")
    resolver.resolve("Great Park", "scaha")
    assert store.calls == 1


def test_cache_rebuilds_after_ttl():
    clock = FakeClock()
    store = FlakyStore(make_venues())
    resolver = VenueResolver(store, ttl_seconds=60, clock=clock)
    resolver.resolve("TSPC", "scaha")

    store.venues = store.venues + [
        Venue("v9", "Paramount Iceland", "8041 Jackson St, Paramount, CA", "place-9", "scaha"),
    ]
    clock.now += 30
    assert resolver.resolve("Paramount Iceland", "scaha") is None

    clock.now += 31
    assert resolver.resolve("Paramount Iceland", "scaha").id == "v9"
    assert store.calls == 2


def test_stale_cache_served_when_store_down():
    clock = FakeClock()
    store = FlakyStore(make_venues())
    resolver = VenueResolver(store, ttl_seconds=60, clock=clock)
    resolver.resolve("TSPC", "scaha")

    store.fail = True
    clock.now += 120
    assert resolver.resolve("TSPC", "scaha").id == "v1"


def test_failed_rebuild_waits_before_asking_store_again():
    clock = FakeClock()
    store = FlakyStore(make_venues())
    resolver = VenueResolver(store, ttl_seconds=60, clock=clock, retry_seconds=30)
    resolver.resolve("TSPC", "scaha")

    store.fail = True
    clock.now += 120
    for _ in range(5):
        assert resolver.resolve("TSPC", "scaha").id == "v1"
    assert store.calls == 2

    clock.now += 31
    store.fail = False
    assert resolver.resolve("TSPC", "scaha").id == "v1"
    assert store.calls == 3
    assert resolver.stats()["age_seconds"] == 0


class BlockingFailingStore(VenueStore):
    """Loads once, then blocks every later load until released and fails."""

    def __init__(self, venues):
        self.venues = venues
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    def load_venues(self):
        self.calls += 1
        if self.calls == 1:
            return list(self.venues)
        self.entered.set()
        self.release.wait(timeout=5)
        raise StoreUnavailableError("timed out")


def test_stale_readers_do_not_wait_on_slow_rebuild():
    clock = FakeClock()
    store = BlockingFailingStore(make_venues())
    resolver = VenueResolver(store, ttl_seconds=60, clock=clock)
    resolver.resolve("TSPC", "scaha")
    clock.now += 120

    results = []
    rebuilding = threading.Thread(target=lambda: results.append(resolver.resolve("TSPC", "scaha")))
    rebuilding.start()
    assert store.entered.wait(timeout=5)

    # The rebuild is still blocked inside the store
    readers = [threading.Thread(target=lambda: results.append(resolver.resolve("Great Park", "scaha")))
               for _ in range(6)]
    for t in readers:
        t.start()
    for t in readers:
        t.join(timeout=1)
    assert not any(t.is_alive() for t in readers)
    assert [v.id for v in results] == ["v2"] * 6
    assert store.calls == 2

    store.release.set()
    rebuilding.join(timeout=5)
    assert results[-1].id == "v1"
    assert store.calls == 2


def test_blank_canonical_name_never_matches_as_substring():
    blank = SimpleNamespace(canonical_name="   ", aliases=())
    index = LeagueIndex([blank] + make_venues()[:3])
    assert "" not in index.names
    assert match_substring("completely unknown rink", index) is None


def test_store_down_without_cache_raises():
    store = FlakyStore(make_venues())
    store.fail = True
    resolver = VenueResolver(store)
    with pytest.raises(StoreUnavailableError):
        resolver.resolve("TSPC", "scaha")


def test_refresh_cache_reports_counts_and_ignores_ttl():
    store = FlakyStore(make_venues())
    resolver = VenueResolver(store, ttl_seconds=3600, clock=FakeClock())
    resolver.resolve("TSPC", "scaha")

    result = resolver.refresh_cache()
    assert store.calls == 2
    assert result.venue_count == 4
    assert result.alias_count == 6
    assert result.to_dict()["refreshed_at"]


def test_failed_refresh_keeps_existing_cache():
    store = FlakyStore(make_venues())
    resolver = VenueResolver(store)
    resolver.refresh_cache()

    store.fail = True
    with pytest.raises(StoreUnavailableError):
        resolver.refresh_cache()
    assert resolver.resolve("TSPC", "scaha").id == "v1"
    assert resolver.stats()["venue_count"] == 4


def test_resolve_venue_request():
    resolver = VenueResolver(InMemoryVenueStore(make_venues()))
    result = resolve_venue_request(resolver, {"venue_name": "tspc", "league": "scaha"})
    assert result["venue"]["canonical_name"] == "Toyota Sports Performance Center"
    assert resolve_venue_request(resolver, {"venue_name": "unknown rink", "league": "scaha"}) == {"venue": None}
    with pytest.raises(IncompleteInputError):
        resolve_venue_request(resolver, {"league": "scaha"})


class SwitchingStore(VenueStore):
    """Alternates between two complete venue sets with a different address generation."""

    def __init__(self, generations):
        self.generations = generations
        self.calls = 0
        self.lock = threading.Lock()

    def load_venues(self):
        with self.lock:
            generation = self.generations[self.calls % len(self.generations)]
            self.calls += 1
        return list(generation)


def test_readers_see_complete_cache_during_concurrent_refreshes():
    names = [f"Rink {i}" for i in range(50)]
    old = [Venue(f"old-{i}", name, f"{i} Old Rd", f"p{i}", "scaha") for i, name in enumerate(names)]
    new = [Venue(f"new-{i}", name, f"{i} New Rd", f"p{i}", "scaha") for i, name in enumerate(names)]
    resolver = VenueResolver(SwitchingStore([old, new]))
    resolver.refresh_cache()

    errors = []
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            index = resolver._current_index()
            league_index = index.for_league(League.SCAHA)
            generations = {v.id.split("-")[0] for v in league_index.names.values()}
            if len(league_index.names) != len(names) or len(generations) != 1:
                errors.append(generations)
            venue = resolver.resolve("Rink 7", "scaha")
            if venue is None:
                errors.append("missing")

    def refresher():
        for _ in range(25):
            resolver.refresh_cache()

    readers = [threading.Thread(target=reader) for _ in range(4)]
    refreshers = [threading.Thread(target=refresher) for _ in range(3)]
    for t in readers + refreshers:
        t.start()
    for t in refreshers:
        t.join()
    stop.set()
    for t in readers:
        t.join()

    assert errors == []
    assert resolver.stats()["venue_count"] == len(names)
