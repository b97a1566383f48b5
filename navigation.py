"""
Screen navigation and session control.

Exactly one screen is active at a time. Entering the main app or the admin
panel requires a successful credential check; every other move is plain user
navigation, restricted to the transitions in ``TRANSITIONS``.
"""

import logging
from enum import Enum
from typing import Optional

from forms import validate_signup
from store import AccountStore, Session

logger = logging.getLogger(__name__)


class Screen(Enum):
    WELCOME = "welcome"
    LOGIN = "login"
    SIGNUP = "signup"
    ADMIN_LOGIN = "admin_login"
    MAIN_APP = "main_app"
    PROFILE = "profile"
    ADMIN_PANEL = "admin_panel"
    ADMIN_PROFILE = "admin_profile"


TRANSITIONS = {
    Screen.WELCOME: {Screen.LOGIN, Screen.SIGNUP, Screen.MAIN_APP, Screen.ADMIN_LOGIN},
    Screen.LOGIN: {Screen.MAIN_APP, Screen.WELCOME},
    Screen.SIGNUP: {Screen.LOGIN, Screen.WELCOME},
    Screen.ADMIN_LOGIN: {Screen.ADMIN_PANEL, Screen.WELCOME},
    Screen.MAIN_APP: {Screen.PROFILE, Screen.WELCOME},
    Screen.PROFILE: {Screen.MAIN_APP},
    Screen.ADMIN_PANEL: {Screen.ADMIN_PROFILE, Screen.WELCOME},
    Screen.ADMIN_PROFILE: {Screen.ADMIN_PANEL},
}

# Reachable only through a credential check
GUARDED = {Screen.ADMIN_PANEL}


class NavigationError(Exception):
    """Raised for a screen change that isn't in the transition table"""
    pass


class Navigator:
    def __init__(self, accounts: AccountStore, session: Optional[Session] = None):
        self.accounts = accounts
        self.session = session or Session()
        self.screen = Screen.WELCOME
        self.is_admin_session = False

    def _move(self, target: Screen) -> None:
        if target not in TRANSITIONS[self.screen]:
            raise NavigationError(f"Cannot go from {self.screen.value} to {target.value}")
        logger.debug(f"Screen {self.screen.value} -> {target.value}")
        self.screen = target

    def go(self, target: Screen) -> None:
        """Unconditional navigation (back buttons, menu choices)"""
        if target in GUARDED and not self.is_admin_session:
            raise NavigationError(f"{target.value} requires admin credentials")
        if target is Screen.MAIN_APP and self.screen in (Screen.WELCOME, Screen.LOGIN):
            raise NavigationError("Use login() or continue_as_guest() to enter the app")
        if target is Screen.PROFILE and self.session.is_guest:
            raise NavigationError("Guests have no profile")
        self._move(target)
        if target is Screen.WELCOME:
            self._reset()

    def login(self, username: str, password: str) -> bool:
        if self.screen is not Screen.LOGIN:
            raise NavigationError("Login is only possible from the login screen")
        if self.accounts.authenticate(username, password, self.session) is None:
            logger.info(f"Failed login for '{username}'")
            return False
        self._move(Screen.MAIN_APP)
        return True

    def continue_as_guest(self) -> None:
        if self.screen is not Screen.WELCOME:
            raise NavigationError("Guest mode is only possible from the welcome screen")
        self.session.clear()
        self._move(Screen.MAIN_APP)

    def sign_up(self, username: str, password: str, confirm_password: str) -> Optional[str]:
        """Register and move to the login screen. Returns an error message on failure."""
        if self.screen is not Screen.SIGNUP:
            raise NavigationError("Sign up is only possible from the signup screen")
        error = validate_signup(username, password, confirm_password)
        if error:
            return error
        if not self.accounts.register(username.strip(), password):
            return "Username already exists."
        self._move(Screen.LOGIN)
        return None

    def admin_login(self, username: str, password: str) -> bool:
        if self.screen is not Screen.ADMIN_LOGIN:
            raise NavigationError("Admin login is only possible from the admin login screen")
        if not self.accounts.is_admin(username, password):
            logger.info("Failed admin login")
            return False
        self.is_admin_session = True
        self._move(Screen.ADMIN_PANEL)
        return True

    def logout(self) -> None:
        self.go(Screen.WELCOME)

    def leave_admin(self) -> None:
        if self.screen is not Screen.ADMIN_PANEL:
            raise NavigationError("Not in the admin panel")
        self.go(Screen.WELCOME)

    def _reset(self) -> None:
        self.session.clear()
        self.is_admin_session = False
