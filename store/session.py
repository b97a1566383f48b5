"""The transient "who is using the app" state. Never persisted."""

from typing import Optional

from config import GUEST_IDENTITY


class Session:
    """Holds at most one current account; ``None`` means guest mode."""

    def __init__(self):
        self.current_user = None

    @property
    def is_guest(self) -> bool:
        return self.current_user is None

    @property
    def username(self) -> Optional[str]:
        return self.current_user.username if self.current_user is not None else None

    @property
    def identity(self) -> str:
        """Watchlist key: the username, or the shared guest bucket."""
        return self.current_user.username if self.current_user is not None else GUEST_IDENTITY

    def set_user(self, account) -> None:
        self.current_user = account

    def clear(self) -> None:
        self.current_user = None
