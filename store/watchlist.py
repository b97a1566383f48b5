"""
Watchlist store: an ordered, per-identity list of saved movies.

Each identity (a username or the shared guest bucket) gets its own text file
``watchlist_<identity>.txt`` with one ``movie_id||title||poster_url`` line per
entry.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import quote

from config import WATCHLIST_DIR
from .persistence import save_text

logger = logging.getLogger(__name__)

SEPARATOR = "||"


def _clean_field(text: str) -> str:
    # No "|" or line break may survive in a field, or the line won't split back into three
    return re.sub(r'[\r\n]+', " ", re.sub(r'\|+', "/", text))


@dataclass
class WatchlistEntry:
    movie_id: int
    title: str
    poster_url: str

    def to_line(self) -> str:
        title = _clean_field(self.title)
        poster_url = _clean_field(self.poster_url)
        return f"{self.movie_id}{SEPARATOR}{title}{SEPARATOR}{poster_url}"

    @classmethod
    def from_line(cls, line: str) -> Optional["WatchlistEntry"]:
        parts = line.rstrip("\r\n").split(SEPARATOR)
        if len(parts) != 3:
            return None
        try:
            movie_id = int(parts[0])
        except ValueError:
            return None
        return cls(movie_id, parts[1], parts[2])


class WatchlistStore:
    def __init__(self, directory: str = WATCHLIST_DIR):
        self.directory = directory
        self._lists: Dict[str, List[WatchlistEntry]] = {}

    def path_for(self, identity: str) -> str:
        # Percent-encoded, so distinct identities never share a file
        safe = quote(identity, safe='')
        return os.path.join(self.directory, f"watchlist_{safe}.txt")

    def load(self, identity: str) -> List[WatchlistEntry]:
        """Read the identity's list from disk, replacing any in-memory copy"""
        path = self.path_for(identity)
        entries: List[WatchlistEntry] = []

        if os.path.exists(path):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    for line_num, line in enumerate(f, 1):
                        if not line.strip():
                            continue
                        entry = WatchlistEntry.from_line(line)
                        if entry is None:
                            logger.warning(f"Skipping malformed watchlist entry {path}:{line_num}: {line.rstrip()}")
                            continue
                        entries.append(entry)
            except OSError as e:
                logger.error(f"Error loading watchlist {path}: {e}")
                entries = []

        self._lists[identity] = entries
        return list(entries)

    def entries(self, identity: str) -> List[WatchlistEntry]:
        if identity not in self._lists:
            self.load(identity)
        return list(self._lists[identity])

    def _list(self, identity: str) -> List[WatchlistEntry]:
        if identity not in self._lists:
            self.load(identity)
        return self._lists[identity]

    def flush(self, identity: str) -> bool:
        entries = self._list(identity)
        text = "".join(entry.to_line() + "\n" for entry in entries)
        return save_text(self.path_for(identity), text)

    def add(self, identity: str, entry: WatchlistEntry) -> bool:
        """Append an entry. Returns False if the movie is already listed."""
        entries = self._list(identity)
        if any(existing.movie_id == entry.movie_id for existing in entries):
            return False

        entries.append(entry)
        self.flush(identity)
        return True

    def remove(self, identity: str, index: int) -> Optional[WatchlistEntry]:
        entries = self._list(identity)
        if not 0 <= index < len(entries):
            return None

        removed = entries.pop(index)
        self.flush(identity)
        return removed

    def clear(self, identity: str) -> None:
        self._list(identity).clear()
        self.flush(identity)
