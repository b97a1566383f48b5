"""
TMDB catalog client: genres, title search, discovery, trailers and posters.
"""

import io
import logging
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import requests
from PIL import Image

from config import (
    RANDOM_PAGE_LIMIT,
    REQUEST_TIMEOUT,
    TMDB_API_KEY,
    TMDB_BASE_URL,
    TMDB_IMAGE_BASE_URL,
    YOUTUBE_WATCH_URL,
)

logger = logging.getLogger(__name__)

ALL_GENRES = "All Genres"
RESULT_COLUMNS = ['id', 'title', 'poster_path', 'overview', 'genre_ids']


class CatalogError(Exception):
    """Network failure or unexpected response from the catalog service"""
    pass


def poster_url(poster_path: Optional[str]) -> Optional[str]:
    if not poster_path:
        return None
    return f"{TMDB_IMAGE_BASE_URL}{poster_path}"


class CatalogGateway:
    def __init__(self, api_key: str = TMDB_API_KEY, base_url: str = TMDB_BASE_URL,
                 timeout: float = REQUEST_TIMEOUT):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    def _get(self, path: str, **params) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        params['api_key'] = self.api_key

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.warning(f"Catalog request {path} failed: {e}")
            raise CatalogError(f"Request to {path} failed: {e}") from e
        except ValueError as e:
            logger.warning(f"Catalog request {path} returned invalid JSON: {e}")
            raise CatalogError(f"Invalid response from {path}") from e

        if not isinstance(data, dict):
            raise CatalogError(f"Unexpected response from {path}")
        return data

    def _list_field(self, data: Dict[str, Any], name: str) -> List[Dict[str, Any]]:
        items = data.get(name)
        if not isinstance(items, list):
            raise CatalogError(f"Response is missing '{name}'")
        return [item for item in items if isinstance(item, dict)]

    def get_genres(self) -> Dict[int, str]:
        """Genre id -> name"""
        genres = self._list_field(self._get("/genre/movie/list"), 'genres')
        try:
            return {int(g['id']): str(g['name']) for g in genres}
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Malformed genre entry: {e}") from e

    def search(self, query: str) -> List[Dict[str, Any]]:
        return self._list_field(self._get("/search/movie", query=query), 'results')

    def discover(self, page: int = 1) -> List[Dict[str, Any]]:
        return self._list_field(self._get("/discover/movie", page=page), 'results')

    def get_videos(self, movie_id: int) -> List[Dict[str, Any]]:
        return self._list_field(self._get(f"/movie/{int(movie_id)}/videos"), 'results')

    def find_trailer_url(self, movie_id: int) -> Optional[str]:
        """YouTube URL of the movie's first trailer, or None if it has none"""
        for video in self.get_videos(movie_id):
            if (str(video.get('type', '')).lower() == 'trailer'
                    and str(video.get('site', '')).lower() == 'youtube'
                    and video.get('key')):
                return f"{YOUTUBE_WATCH_URL}{video['key']}"
        return None

    def random_movie(self, attempts: int = 5, rng: Optional[random.Random] = None) -> Optional[Dict[str, Any]]:
        """A random discover result that has an id, a title and a poster, or None"""
        rng = rng or random.Random()
        for _ in range(attempts):
            page = rng.randint(1, RANDOM_PAGE_LIMIT)
            candidates = [m for m in self.discover(page)
                          if m.get('id') is not None and m.get('title') and m.get('poster_path')]
            if candidates:
                return rng.choice(candidates)
        return None


def results_frame(results: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Tabulate search/discover results for display.

    Results without a poster, a title or a numeric id are dropped; missing
    overviews get a placeholder.
    """
    rows = []
    for movie in results:
        if not movie.get('poster_path') or not movie.get('title'):
            continue
        try:
            movie_id = int(movie.get('id'))
        except (TypeError, ValueError):
            logger.warning(f"Skipping result with invalid id: {movie.get('id')!r}")
            continue
        rows.append({
            'id': movie_id,
            'title': movie['title'],
            'poster_path': movie['poster_path'],
            'overview': movie.get('overview') or "No description available",
            'genre_ids': list(movie.get('genre_ids') or []),
        })

    df = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    df['poster_url'] = df['poster_path'].map(poster_url)
    return df


def filter_by_genre(df: pd.DataFrame, genre_name: str, genre_map: Dict[int, str]) -> pd.DataFrame:
    """Keep rows with at least one genre id mapping to ``genre_name``"""
    if not genre_name or genre_name == ALL_GENRES or df.empty:
        return df

    mask = df['genre_ids'].map(lambda ids: any(genre_map.get(g) == genre_name for g in ids))
    return df[mask]


def fetch_poster_thumbnail(url: str, width: int = 60, timeout: float = REQUEST_TIMEOUT) -> Optional[Image.Image]:
    """Download a poster and scale it to ``width`` keeping the aspect ratio"""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        image = Image.open(io.BytesIO(response.content))
        image.load()
    except (requests.RequestException, OSError) as e:
        logger.warning(f"Error loading poster {url}: {e}")
        return None

    if image.width == 0:
        return None
    height = max(1, round(image.height * width / image.width))
    return image.resize((width, height), Image.LANCZOS)


class LatestOnly:
    """
    Keeps only the result of the most recently issued request.

    Each request takes a ticket from ``issue()``; ``offer()`` accepts a
    completed result only if no newer ticket has been issued since.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._issued = 0
        self._accepted = 0
        self._value = None

    def issue(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def is_latest(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._issued

    def offer(self, ticket: int, value: Any) -> bool:
        with self._lock:
            if ticket != self._issued:
                logger.debug(f"Discarding stale result for request {ticket} (latest {self._issued})")
                return False
            self._accepted = ticket
            self._value = value
            return True

    @property
    def value(self) -> Any:
        with self._lock:
            return self._value

    @property
    def ticket(self) -> int:
        """Ticket of the currently accepted value (0 if none)"""
        with self._lock:
            return self._accepted


class SearchRunner:
    """Runs catalog fetches off the calling thread; only the newest result wins"""

    def __init__(self, fetch: Callable[[str], Any], executor: Optional[ThreadPoolExecutor] = None):
        self.fetch = fetch
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix='catalog')
        self.latest = LatestOnly()

    def submit(self, query: str) -> Future:
        """
        Start a fetch. The returned future resolves to True if its result
        was accepted, False if a newer request overtook it. Fetch errors
        propagate through the future.
        """
        ticket = self.latest.issue()

        def run():
            return self.latest.offer(ticket, self.fetch(query))

        return self.executor.submit(run)

    @property
    def value(self) -> Any:
        return self.latest.value
