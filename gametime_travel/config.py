import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

class Config:
    """
    Configuration class for GameTime Travel.
    This class loads configuration values from environment variables or uses default values.
    """
    # General configuration
    DEBUG = os.environ.get('DEBUG', 'False') == 'True'

    # Timezone / league defaults for events that omit them
    DEFAULT_TIMEZONE = os.environ.get('DEFAULT_TIMEZONE', 'America/Los_Angeles')
    DEFAULT_LEAGUE = os.environ.get('DEFAULT_LEAGUE', 'scaha')

    # Routing provider (Google Routes API)
    GOOGLE_MAPS_API_KEY = os.environ.get('GOOGLE_MAPS_API_KEY')
    ROUTES_URL = os.environ.get('ROUTES_URL', 'https://routes.googleapis.com/directions/v2:computeRoutes')
    TRAFFIC_MODEL = os.environ.get('TRAFFIC_MODEL', 'PESSIMISTIC')
    ROUTING_TIMEOUT_SECONDS = float(os.environ.get('ROUTING_TIMEOUT_SECONDS', 5))

    # Geocoding, only used for straight-line fallback estimates
    OSM_URL = os.environ.get('OSM_URL', 'https://nominatim.openstreetmap.org/search')

    # Venue store
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    SUPABASE_ANON_KEY = os.environ.get('SUPABASE_ANON_KEY')
    VENUES_FILE = os.environ.get('VENUES_FILE')
    VENUE_CACHE_TTL_HOURS = float(os.environ.get('VENUE_CACHE_TTL_HOURS', 24))
    VENUE_STORE_RETRY_SECONDS = float(os.environ.get('VENUE_STORE_RETRY_SECONDS', 60))

    # Departure convergence tuning
    SEED_DURATION_MINUTES = float(os.environ.get('SEED_DURATION_MINUTES', 45))
    CONVERGENCE_THRESHOLD_MINUTES = float(os.environ.get('CONVERGENCE_THRESHOLD_MINUTES', 5))
    MAX_EXTRA_ITERATIONS = int(os.environ.get('MAX_EXTRA_ITERATIONS', 2))

    # Distance-based fallback when routing is unavailable
    FALLBACK_SPEED_KMH = float(os.environ.get('FALLBACK_SPEED_KMH', 56))
    ROAD_CIRCUITY_FACTOR = float(os.environ.get('ROAD_CIRCUITY_FACTOR', 1.3))

    # User preference defaults
    DEFAULT_GET_READY_MINUTES = int(os.environ.get('DEFAULT_GET_READY_MINUTES', 30))
    DEFAULT_ARRIVAL_BUFFER_MINUTES = int(os.environ.get('DEFAULT_ARRIVAL_BUFFER_MINUTES', 60))
