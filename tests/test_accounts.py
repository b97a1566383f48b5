"""
Tests for AccountStore: registration, login, the protected admin account,
and first-run bootstrap.
"""

from config import ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD, SAMPLE_PASSWORD, SAMPLE_USERNAME
from store import AccountStore, DeleteOutcome


def test_fresh_store_has_admin_and_sample_user(accounts):
    names = [a.username for a in accounts.list_all()]
    assert names == sorted([ADMIN_USERNAME, SAMPLE_USERNAME])
    assert accounts.is_admin(ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)
    assert accounts.authenticate(SAMPLE_USERNAME, SAMPLE_PASSWORD) is not None


def test_bootstrap_is_idempotent(users_file):
    store = AccountStore(users_file).init()
    store.register("alice", "pw1")
    store.update_admin_password("changed")

    reloaded = AccountStore(users_file).init()
    reloaded.init()
    assert len(reloaded.list_all()) == 3
    assert reloaded.is_admin(ADMIN_USERNAME, "changed")
    assert reloaded.authenticate("alice", "pw1") is not None


def test_sample_user_not_seeded_when_other_accounts_exist(users_file):
    store = AccountStore(users_file).init()
    store.delete(SAMPLE_USERNAME)
    store.register("bob", "pw")

    reloaded = AccountStore(users_file).init()
    assert reloaded.get(SAMPLE_USERNAME) is None


def test_register_duplicate_keeps_original_password(accounts):
    assert accounts.register("alice", "pw1") is True
    assert accounts.register("alice", "pw2") is False
    assert accounts.get("alice").password == "pw1"


def test_usernames_are_case_sensitive(accounts):
    assert accounts.register("alice", "pw1")
    assert accounts.register("Alice", "pw2")
    assert accounts.authenticate("ALICE", "pw1") is None


def test_register_and_login_scenario(accounts, session):
    assert accounts.register("alice", "pw1") is True
    assert accounts.register("alice", "pw2") is False

    assert accounts.authenticate("alice", "pw1", session) is not None
    assert session.username == "alice"

    assert accounts.authenticate("alice", "pw2", session) is None
    assert session.username == "alice"


def test_failed_login_leaves_guest_session(accounts, session):
    assert accounts.authenticate("nobody", "x", session) is None
    assert session.is_guest


def test_is_admin_requires_exact_pair(accounts):
    assert not accounts.is_admin(ADMIN_USERNAME, "wrong")
    assert not accounts.is_admin(SAMPLE_USERNAME, SAMPLE_PASSWORD)
    assert not accounts.is_admin("Admin", DEFAULT_ADMIN_PASSWORD)


def test_admin_password_change_tracks_is_admin(accounts):
    assert accounts.update_admin_password("newpass") is True
    assert accounts.is_admin(ADMIN_USERNAME, "newpass")
    assert not accounts.is_admin(ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)
    assert accounts.admin_default_password == "newpass"


def test_update_password(accounts):
    assert accounts.update_password(SAMPLE_USERNAME, "fresh")
    assert accounts.authenticate(SAMPLE_USERNAME, "fresh") is not None
    assert accounts.update_password("ghost", "x") is False


def test_admin_cannot_be_deleted(accounts):
    outcome = accounts.delete(ADMIN_USERNAME)
    assert outcome is DeleteOutcome.REFUSED
    assert not outcome
    assert accounts.get(ADMIN_USERNAME) is not None


def test_delete_user(accounts):
    accounts.register("alice", "pw")
    assert accounts.delete("alice") is DeleteOutcome.DELETED
    assert accounts.delete("alice") is DeleteOutcome.NOT_FOUND
    assert accounts.authenticate("alice", "pw") is None


def test_corrupt_file_falls_back_to_defaults(users_file):
    with open(users_file, 'wb') as f:
        f.write(b"not a pickle")

    store = AccountStore(users_file).init()
    assert store.is_admin(ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)


def test_changes_survive_reload(users_file):
    store = AccountStore(users_file).init()
    store.register("carol", "secret")

    reloaded = AccountStore(users_file).init()
    assert reloaded.authenticate("carol", "secret") is not None
