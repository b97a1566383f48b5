# Movie Explorer configuration: TMDB access, storage paths, built-in accounts and logging
import logging
import os

def get_tmdb_api_key():
    """Get TMDB API key from api file or environment variable"""
    try:
        # Try to read from api file first
        with open('api', 'r') as f:
            api_key = f.read().strip()
            if api_key:
                return api_key
    except FileNotFoundError:
        pass

    # Fallback to environment variable
    return os.getenv('TMDB_API_KEY', '')

# TMDB API endpoints
TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w185"  # Poster size used by result cards
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="

# API key
TMDB_API_KEY = get_tmdb_api_key()

REQUEST_TIMEOUT = float(os.getenv('MOVIE_EXPLORER_TIMEOUT', '5'))
RANDOM_PAGE_LIMIT = 50  # discover pages sampled by "Random"

# Storage locations
DATA_DIR = os.getenv('MOVIE_EXPLORER_DATA_DIR', '.')
USERS_FILE = os.path.join(DATA_DIR, 'users.ser')
REVIEWS_FILE = os.path.join(DATA_DIR, 'reviews.ser')
WATCHLIST_DIR = DATA_DIR

# Built-in identities
ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "adminpass"
SAMPLE_USERNAME = "testuser"
SAMPLE_PASSWORD = "password123"
GUEST_IDENTITY = "guest"

LOG_LEVEL = os.getenv('MOVIE_EXPLORER_LOG_LEVEL', 'INFO')


def setup_logging(level=None):
    """Setup logging configuration"""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def ensure_data_files(*paths):
    """Create empty store files that don't exist yet"""
    for path in paths or (USERS_FILE, REVIEWS_FILE):
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            if not os.path.exists(path):
                open(path, 'ab').close()
        except OSError as e:
            logging.getLogger(__name__).error(f"Could not create data file {path}: {e}")
