import requests
import logging
import math
import re
import datetime
from .config import Config
from .errors import ErrorCode, RoutingError


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate the great-circle distance between two points on Earth.
    """
    R = 6371  # Earth radius in kilometers
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)
    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return R * c


def parse_duration(duration):
    """Parse a Routes API duration string such as '3720s' into seconds."""
    match = re.match(r'^(\d+(?:\.\d+)?)s$', duration or '')
    if not match:
        raise RoutingError(ErrorCode.BAD_RESPONSE, f"Unexpected duration format: {duration}")
    return float(match.group(1))


def maps_url(origin, destination):
    """Google Maps driving directions link for the two addresses."""
    return requests.Request(
        'GET',
        'https://www.google.com/maps/dir/',
        params={"api": 1, "origin": origin, "destination": destination, "travelmode": "driving"},
    ).prepare().url


class RouteResult:
    def __init__(self, duration_minutes, distance_meters=None):
        self.duration_minutes = duration_minutes
        self.distance_meters = distance_meters

    def __repr__(self):
        return f"RouteResult({self.duration_minutes:.1f} min, {self.distance_meters} m)"


class APIClient:
    """
    Client for the Google Routes API and OpenStreetMap Nominatim.
    Handles traffic-aware drive durations and geocoding for distance estimates.
    """

    FIELD_MASK = "routes.duration,routes.distanceMeters"

    def __init__(self, api_key=None, timeout=None):
        """
        Initialize the API client.
        """
        self.api_key = api_key or Config.GOOGLE_MAPS_API_KEY
        self.timeout = timeout if timeout is not None else Config.ROUTING_TIMEOUT_SECONDS
        self.geocode_cache = {}  # key: normalized address, value: (lat, lon)

    def _normalize_address(self, address: str) -> str:
        """
        Collapse whitespace and trailing punctuation so equivalent addresses share a cache entry.
        """
        if not address:
            logging.error("Empty address provided for normalization")
            return ""
        return re.sub(r'\s+', ' ', address).strip().rstrip(',').strip()

    def build_route_request(self, origin, destination, departure_utc, traffic_model=None):
        """
        Build a computeRoutes request body that asks for the drive duration
        when departing at ``departure_utc``.
        """
        if departure_utc.tzinfo is None:
            departure_utc = departure_utc.replace(tzinfo=datetime.timezone.utc)
        departure_utc = departure_utc.astimezone(datetime.timezone.utc)
        return {
            "origin": {"address": origin},
            "destination": {"address": destination},
            "travelMode": "DRIVE",
            "routingPreference": "TRAFFIC_AWARE_OPTIMAL",
            "departureTime": departure_utc.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "trafficModel": traffic_model or Config.TRAFFIC_MODEL,
            "computeAlternativeRoutes": False,
            "languageCode": "en-US",
            "units": "IMPERIAL",
        }

    def compute_route(self, origin: str, destination: str, departure_utc, traffic_model=None):
        """
        Predicted drive duration for a departure at ``departure_utc``.

        Raises RoutingError on network errors, unroutable addresses, quota
        exhaustion or an unexpected response shape.
        """
        if not self.api_key:
            raise RoutingError(ErrorCode.NETWORK_ERROR, "GOOGLE_MAPS_API_KEY environment variable is not set")

        body = self.build_route_request(origin, destination, departure_utc, traffic_model)
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": self.FIELD_MASK,
        }

        logging.info(f"Requesting route departing {body['departureTime']} ({body['trafficModel']})")
        try:
            response = requests.post(Config.ROUTES_URL, json=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logging.warning(f"Timeout after {self.timeout}s calling Routes API")
            raise RoutingError(ErrorCode.NETWORK_ERROR, "Routes API timed out") from e
        except requests.exceptions.RequestException as e:
            logging.warning(f"Request error calling Routes API: {str(e)}")
            raise RoutingError(ErrorCode.NETWORK_ERROR, f"Request error: {str(e)}") from e

        if response.status_code != 200:
            text = response.text[:200]  # Limit to first 200 chars to avoid huge logs
            logging.warning(f"Routes API returned {response.status_code}: {text}")
            if response.status_code == 429:
                code = ErrorCode.QUOTA_EXCEEDED
            elif response.status_code in (400, 404):
                code = ErrorCode.INVALID_ADDRESS
            else:
                code = ErrorCode.NETWORK_ERROR
            raise RoutingError(code, f"Routes API error (status {response.status_code})", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise RoutingError(ErrorCode.BAD_RESPONSE, "Routes API returned invalid JSON") from e

        routes = data.get("routes") or []
        if not routes:
            # An empty body means no drivable route between the addresses
            raise RoutingError(ErrorCode.INVALID_ADDRESS, "Routes API returned no routes")

        route = routes[0]
        seconds = parse_duration(route.get("duration"))
        result = RouteResult(seconds / 60, route.get("distanceMeters"))
        logging.info("Routes API predicted %s", result)
        return result

    def geocode_address(self, address: str):
        """
        Geocodes an address using Nominatim.
        Uses a cache to avoid repeat API calls.
        """
        if not address:
            logging.error("Empty address provided for geocoding")
            return None

        normalized = self._normalize_address(address)

        # Check cache first
        if normalized in self.geocode_cache:
            logging.info("Cache hit for address '%s'", normalized)
            return self.geocode_cache[normalized]

        url = Config.OSM_URL or "https://nominatim.openstreetmap.org/search"
        params = {"q": normalized, "format": "json", "limit": 1}
        headers = {"User-Agent": "GameTimeTravel/1.0"}

        try:
            response = requests.get(url, params=params, headers=headers, timeout=self.timeout)
            if response.status_code != 200:
                logging.error("Nominatim geocoding failed: %s", response.text)
                return None
            data = response.json()
            if not data:
                logging.error("No geocoding result for address: %s", normalized)
                return None
            lat = float(data[0]['lat'])
            lon = float(data[0]['lon'])
        except (requests.exceptions.RequestException, ValueError, KeyError) as e:
            logging.error("Exception during geocoding: %s", e)
            return None

        coords = (lat, lon)
        logging.info("Geocoded address '%s' to lat: %s, lon: %s", normalized, lat, lon)
        self.geocode_cache[normalized] = coords
        return coords
