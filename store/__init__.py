"""
Storage package for Movie Explorer.

Accounts, reviews and watchlists, each kept in memory and rewritten to a flat
file after every change, plus the transient login session.
"""

from .accounts import (
    Account,
    AccountStore,
    DeleteOutcome
)

from .reviews import (
    Review,
    ReviewStore,
    clamp_rating
)

from .watchlist import (
    WatchlistEntry,
    WatchlistStore
)

from .session import Session

__all__ = [
    'Account',
    'AccountStore',
    'DeleteOutcome',
    'Review',
    'ReviewStore',
    'clamp_rating',
    'WatchlistEntry',
    'WatchlistStore',
    'Session'
]
