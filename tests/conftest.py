import pytest

from store import AccountStore, ReviewStore, Session, WatchlistStore


@pytest.fixture
def users_file(tmp_path):
    return str(tmp_path / "users.ser")


@pytest.fixture
def accounts(users_file):
    return AccountStore(users_file).init()


@pytest.fixture
def reviews(tmp_path):
    return ReviewStore(str(tmp_path / "reviews.ser")).init()


@pytest.fixture
def watchlists(tmp_path):
    return WatchlistStore(str(tmp_path))


@pytest.fixture
def session():
    return Session()
