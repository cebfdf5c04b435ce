from enum import Enum


class League(Enum):
    SCAHA = "scaha"
    PGHL = "pghl"

    @classmethod
    def parse(cls, value):
        """Accept a League, its value or its name in any case."""
        if isinstance(value, cls):
            return value
        if not value:
            raise ValueError("League is required")
        candidate = str(value).strip().lower()
        for league in cls:
            if candidate in (league.value, league.name.lower()):
                return league
        raise ValueError(f"Unknown league: {value}")


class Venue:
    def __init__(self, venue_id, canonical_name, address, place_id, league, aliases=()):
        if not canonical_name or not canonical_name.strip():
            raise ValueError(f"Venue {venue_id} has no name")
        if not address or not address.strip():
            raise ValueError(f"Venue '{canonical_name}' has no address")
        self.id = venue_id
        self.canonical_name = canonical_name
        self.address = address.strip()
        self.place_id = place_id
        self.league = League.parse(league)
        self.aliases = tuple(aliases)

    @classmethod
    def from_row(cls, row):
        """Build a venue from a store row with nested ``venue_aliases``."""
        aliases = [a["alias_text"] for a in row.get("venue_aliases") or [] if a.get("alias_text")]
        return cls(
            venue_id=row["id"],
            canonical_name=row["canonical_name"],
            address=row.get("address") or "",
            place_id=row.get("place_id"),
            league=row.get("league"),
            aliases=aliases,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "canonical_name": self.canonical_name,
            "address": self.address,
            "place_id": self.place_id,
            "league": self.league.value,
            "aliases": list(self.aliases),
        }

    def __eq__(self, other):
        if not isinstance(other, Venue):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.id, self.league))

    def __repr__(self):
        return f"Venue({self.id}, {self.canonical_name}, {self.league.value})"


class VenueAlias:
    def __init__(self, alias_id, venue_id, alias_text):
        self.id = alias_id
        self.venue_id = venue_id
        self.alias_text = alias_text

    def __repr__(self):
        return f"VenueAlias({self.venue_id}, {self.alias_text})"
