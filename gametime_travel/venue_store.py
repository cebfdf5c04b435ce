"""Venue store interfaces and implementations.

Stores are read-only from the resolver's point of view and return fully
built ``Venue`` objects with their aliases attached.
"""

import json
import logging
from abc import ABC, abstractmethod

import requests

from .config import Config
from .errors import StoreUnavailableError
from .venue import Venue, VenueAlias


class VenueStore(ABC):
    """Interface for loading canonical venues and their aliases."""

    @abstractmethod
    def load_venues(self) -> list:
        """Return every venue, each annotated with its aliases.

        Raises StoreUnavailableError if the store cannot be read.
        """
        ...


class InMemoryVenueStore(VenueStore):
    """Store backed by a Python list. Used by tests and admin tooling."""

    def __init__(self, venues=None):
        self.venues = list(venues or [])

    def load_venues(self):
        return list(self.venues)


class JsonFileVenueStore(VenueStore):
    """
    Store backed by a JSON file.

    The file holds either a list of venue rows with nested ``venue_aliases``
    (the Supabase export shape) or an object with separate ``venues`` and
    ``venue_aliases`` lists.
    """

    def __init__(self, path):
        self.path = path

    def load_venues(self):
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailableError(f"Could not read venues file {self.path}: {e}") from e

        try:
            return self._parse(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreUnavailableError(f"Malformed venues file {self.path}: {e}") from e

    def _parse(self, data):
        if isinstance(data, list):
            return [Venue.from_row(row) for row in data]

        aliases = [
            VenueAlias(a.get("id"), a["venue_id"], a["alias_text"])
            for a in data.get("venue_aliases", [])
        ]
        rows = []
        for row in data.get("venues", []):
            row = dict(row)
            row["venue_aliases"] = [
                {"alias_text": alias.alias_text} for alias in aliases if alias.venue_id == row["id"]
            ]
            rows.append(row)
        return [Venue.from_row(row) for row in rows]


class SupabaseVenueStore(VenueStore):
    """
    Store backed by the Supabase ``venues`` and ``venue_aliases`` tables,
    read through the PostgREST endpoint in a single embedded select.
    """

    def __init__(self, url=None, api_key=None, timeout=10):
        self.url = (url or Config.SUPABASE_URL or "").rstrip("/")
        self.api_key = api_key or Config.SUPABASE_ANON_KEY
        self.timeout = timeout

    def load_venues(self):
        if not self.url or not self.api_key:
            raise StoreUnavailableError("Missing SUPABASE_URL and/or SUPABASE_ANON_KEY")

        endpoint = f"{self.url}/rest/v1/venues"
        params = {"select": "*,venue_aliases(*)", "order": "canonical_name"}
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "accept": "application/json",
        }

        try:
            response = requests.get(endpoint, params=params, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error("Failed to reach venue store: %s", e)
            raise StoreUnavailableError(str(e)) from e

        if response.status_code != 200:
            logging.error("Venue store returned %s: %s", response.status_code, response.text[:200])
            raise StoreUnavailableError(f"HTTP {response.status_code}")

        try:
            rows = response.json()
        except ValueError as e:
            raise StoreUnavailableError("Venue store returned invalid JSON") from e

        venues = []
        for row in rows:
            try:
                venues.append(Venue.from_row(row))
            except (KeyError, ValueError) as e:
                logging.warning(f"Skipping malformed venue row {row.get('id')}: {e}")
        return venues


def store_from_config(venues_file=None):
    """Pick a store: an explicit venues file wins, then Supabase."""
    path = venues_file or Config.VENUES_FILE
    if path:
        logging.info(f"Using venue file store: {path}")
        return JsonFileVenueStore(path)
    return SupabaseVenueStore()
