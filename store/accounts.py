"""
Account store for Movie Explorer
Username/password accounts with a protected administrator, file-based storage
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from config import (
    ADMIN_USERNAME,
    DEFAULT_ADMIN_PASSWORD,
    SAMPLE_PASSWORD,
    SAMPLE_USERNAME,
    USERS_FILE,
)
from .persistence import load_pickle, save_pickle

logger = logging.getLogger(__name__)


@dataclass
class Account:
    username: str
    password: str


class DeleteOutcome(Enum):
    DELETED = "deleted"
    REFUSED = "refused"
    NOT_FOUND = "not_found"

    def __bool__(self):
        return self is DeleteOutcome.DELETED


class AccountStore:
    """Username -> Account mapping persisted as one pickled file"""

    def __init__(self, users_file: str = USERS_FILE, admin_username: str = ADMIN_USERNAME,
                 admin_default_password: str = DEFAULT_ADMIN_PASSWORD):
        self.users_file = users_file
        self.admin_username = admin_username
        self.admin_default_password = admin_default_password
        self.users: Dict[str, Account] = {}

    def init(self) -> "AccountStore":
        """Load the users file and make sure the built-in accounts exist"""
        self.users = load_pickle(self.users_file, dict, dict)
        logger.info(f"Loaded {len(self.users)} accounts from {self.users_file}")
        self._bootstrap()
        return self

    def flush(self) -> bool:
        """Save users to the users file"""
        return save_pickle(self.users_file, self.users)

    def _bootstrap(self) -> None:
        changed = False
        if self.admin_username not in self.users:
            self.users[self.admin_username] = Account(self.admin_username, self.admin_default_password)
            logger.info("Created default admin account")
            changed = True

        # Seed a regular account so a fresh install can log in right away
        if len(self.users) == 1 and self.admin_username in self.users:
            self.users[SAMPLE_USERNAME] = Account(SAMPLE_USERNAME, SAMPLE_PASSWORD)
            logger.info(f"Created sample account '{SAMPLE_USERNAME}'")
            changed = True

        if changed:
            self.flush()

    def register(self, username: str, password: str) -> bool:
        """
        Create a new account

        Args:
            username: Username (must be unique, case-sensitive)
            password: Plaintext password

        Returns:
            bool: True if created, False if the username exists
        """
        if username in self.users:
            return False

        self.users[username] = Account(username, password)
        self.flush()
        logger.info(f"Registered account '{username}'")
        return True

    def authenticate(self, username: str, password: str, session=None) -> Optional[Account]:
        """
        Check credentials against the stored password

        On success the account becomes the session's current user (when a
        session is given). A failed attempt leaves the session as it was.
        """
        account = self.users.get(username)
        if account is None or account.password != password:
            return None

        if session is not None:
            session.set_user(account)
        return account

    def is_admin(self, username: str, password: str) -> bool:
        admin = self.users.get(self.admin_username)
        return admin is not None and username == self.admin_username and admin.password == password

    def get(self, username: str) -> Optional[Account]:
        return self.users.get(username)

    def update_password(self, username: str, new_password: str) -> bool:
        account = self.users.get(username)
        if account is None:
            return False

        account.password = new_password
        self.flush()
        return True

    def update_admin_password(self, new_password: str) -> bool:
        if not self.update_password(self.admin_username, new_password):
            return False
        self.admin_default_password = new_password
        return True

    def delete(self, username: str) -> DeleteOutcome:
        """Delete an account. The administrator can never be deleted."""
        if username == self.admin_username:
            return DeleteOutcome.REFUSED
        if username not in self.users:
            return DeleteOutcome.NOT_FOUND

        del self.users[username]
        self.flush()
        logger.info(f"Deleted account '{username}'")
        return DeleteOutcome.DELETED

    def list_all(self) -> List[Account]:
        return [self.users[name] for name in sorted(self.users)]
