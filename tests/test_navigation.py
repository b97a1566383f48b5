"""Tests for the screen state machine and session handling."""

import pytest

from config import ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD, SAMPLE_PASSWORD, SAMPLE_USERNAME
from navigation import NavigationError, Navigator, Screen


@pytest.fixture
def nav(accounts):
    return Navigator(accounts)


def test_starts_on_welcome_as_guest(nav):
    assert nav.screen is Screen.WELCOME
    assert nav.session.is_guest


def test_login_enters_main_app(nav):
    nav.go(Screen.LOGIN)
    assert nav.login(SAMPLE_USERNAME, SAMPLE_PASSWORD)
    assert nav.screen is Screen.MAIN_APP
    assert nav.session.username == SAMPLE_USERNAME
    assert nav.session.identity == SAMPLE_USERNAME


def test_bad_login_stays_on_login(nav):
    nav.go(Screen.LOGIN)
    assert not nav.login(SAMPLE_USERNAME, "wrong")
    assert nav.screen is Screen.LOGIN
    assert nav.session.is_guest


def test_main_app_not_reachable_without_login(nav):
    with pytest.raises(NavigationError):
        nav.go(Screen.MAIN_APP)
    nav.go(Screen.LOGIN)
    with pytest.raises(NavigationError):
        nav.go(Screen.MAIN_APP)


def test_guest_mode(nav):
    nav.continue_as_guest()
    assert nav.screen is Screen.MAIN_APP
    assert nav.session.identity == "guest"
    with pytest.raises(NavigationError):
        nav.go(Screen.PROFILE)


def test_guest_mode_only_from_welcome(nav):
    nav.go(Screen.LOGIN)
    with pytest.raises(NavigationError):
        nav.continue_as_guest()
    assert nav.screen is Screen.LOGIN

    nav.login(SAMPLE_USERNAME, SAMPLE_PASSWORD)
    nav.go(Screen.PROFILE)
    with pytest.raises(NavigationError):
        nav.continue_as_guest()
    assert nav.screen is Screen.PROFILE
    assert nav.session.username == SAMPLE_USERNAME


def test_session_survives_profile_round_trip_and_clears_on_logout(nav):
    nav.go(Screen.LOGIN)
    nav.login(SAMPLE_USERNAME, SAMPLE_PASSWORD)
    nav.go(Screen.PROFILE)
    nav.go(Screen.MAIN_APP)
    assert nav.session.username == SAMPLE_USERNAME

    nav.logout()
    assert nav.screen is Screen.WELCOME
    assert nav.session.is_guest


def test_sign_up_flow(nav):
    nav.go(Screen.SIGNUP)
    assert nav.sign_up("alice", "pw", "other") == "Passwords do not match."
    assert nav.sign_up("", "pw", "pw") == "All fields are required."
    assert nav.screen is Screen.SIGNUP

    assert nav.sign_up("alice", "pw", "pw") is None
    assert nav.screen is Screen.LOGIN

    nav.go(Screen.WELCOME)
    nav.go(Screen.SIGNUP)
    assert nav.sign_up("alice", "pw2", "pw2") == "Username already exists."


def test_admin_panel_requires_admin_credentials(nav):
    with pytest.raises(NavigationError):
        nav.go(Screen.ADMIN_PANEL)

    nav.go(Screen.ADMIN_LOGIN)
    with pytest.raises(NavigationError):
        nav.go(Screen.ADMIN_PANEL)
    assert not nav.admin_login(SAMPLE_USERNAME, SAMPLE_PASSWORD)
    assert nav.screen is Screen.ADMIN_LOGIN

    assert nav.admin_login(ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)
    assert nav.screen is Screen.ADMIN_PANEL


def test_admin_profile_round_trip(nav):
    nav.go(Screen.ADMIN_LOGIN)
    nav.admin_login(ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)
    nav.go(Screen.ADMIN_PROFILE)
    nav.go(Screen.ADMIN_PANEL)
    assert nav.screen is Screen.ADMIN_PANEL

    nav.go(Screen.WELCOME)
    assert not nav.is_admin_session
    nav.go(Screen.ADMIN_LOGIN)
    with pytest.raises(NavigationError):
        nav.go(Screen.ADMIN_PANEL)


def test_invalid_transitions_rejected(nav):
    with pytest.raises(NavigationError):
        nav.go(Screen.ADMIN_PROFILE)
    nav.go(Screen.SIGNUP)
    with pytest.raises(NavigationError):
        nav.go(Screen.ADMIN_LOGIN)
    with pytest.raises(NavigationError):
        nav.login(SAMPLE_USERNAME, SAMPLE_PASSWORD)


def test_leave_admin_ends_admin_session(nav):
    with pytest.raises(NavigationError):
        nav.leave_admin()

    nav.go(Screen.ADMIN_LOGIN)
    nav.admin_login(ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)
    nav.leave_admin()
    assert nav.screen is Screen.WELCOME
    assert not nav.is_admin_session
