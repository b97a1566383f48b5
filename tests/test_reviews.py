"""Tests for ReviewStore keyed by (movie_id, username, created_at)."""

from store import Review, ReviewStore

T1 = 1_700_000_000_000


def test_rating_is_clamped():
    assert Review(1, "alice", 9, "x", created_at=T1).rating == 5
    assert Review(1, "alice", 0, "x", created_at=T1).rating == 1


def test_list_for_unknown_movie_is_empty(reviews):
    assert reviews.list_for_movie(999) == []


def test_update_preserves_created_at(reviews):
    reviews.add(Review(42, "alice", 5, "great", created_at=T1))
    assert len(reviews.list_for_movie(42)) == 1

    assert reviews.update(42, "alice", T1, 3, "ok") is True

    [review] = reviews.list_for_movie(42)
    assert (review.rating, review.text, review.created_at) == (3, "ok", T1)


def test_update_missing_review(reviews):
    reviews.add(Review(42, "alice", 5, "great", created_at=T1))
    assert reviews.update(42, "alice", T1 + 5, 3, "ok") is False
    assert reviews.update(43, "alice", T1, 3, "ok") is False
    assert reviews.update(42, "bob", T1, 3, "ok") is False


def test_update_clamps_rating(reviews):
    reviews.add(Review(42, "alice", 5, "great", created_at=T1))
    reviews.update(42, "alice", T1, 12, "wow")
    assert reviews.list_for_movie(42)[0].rating == 5


def test_multiple_reviews_per_user_allowed(reviews):
    reviews.add(Review(7, "alice", 4, "first", created_at=T1))
    reviews.add(Review(7, "alice", 2, "second", created_at=T1 + 10))
    assert [r.text for r in reviews.list_for_movie(7)] == ["first", "second"]


def test_colliding_key_gets_unique_timestamp(reviews):
    first = reviews.add(Review(7, "alice", 4, "first", created_at=T1))
    second = reviews.add(Review(7, "alice", 2, "second", created_at=T1))

    assert first.created_at == T1
    assert second.created_at == T1 + 1
    keys = [r.key for r in reviews.list_for_movie(7)]
    assert len(keys) == len(set(keys))


def test_delete_last_review_drops_movie(reviews):
    reviews.add(Review(42, "alice", 5, "great", created_at=T1))
    reviews.add(Review(43, "bob", 2, "meh", created_at=T1))

    assert reviews.delete(42, "alice", T1) is True
    assert reviews.list_for_movie(42) == []
    assert 42 not in reviews.movie_ids()
    assert reviews.movie_ids() == [43]
    assert reviews.delete(42, "alice", T1) is False


def test_delete_keeps_other_reviews(reviews):
    reviews.add(Review(42, "alice", 5, "great", created_at=T1))
    reviews.add(Review(42, "bob", 1, "bad", created_at=T1))

    assert reviews.delete(42, "alice", T1)
    assert [r.username for r in reviews.list_for_movie(42)] == ["bob"]


def test_list_all_flattens(reviews):
    reviews.add(Review(1, "alice", 5, "a", created_at=T1))
    reviews.add(Review(2, "bob", 4, "b", created_at=T1))
    reviews.add(Review(1, "carol", 3, "c", created_at=T1))
    assert sorted(r.username for r in reviews.list_all()) == ["alice", "bob", "carol"]


def test_summary(reviews):
    assert reviews.summary(1) == (0, 0.0)
    reviews.add(Review(1, "alice", 5, "a", created_at=T1))
    reviews.add(Review(1, "bob", 2, "b", created_at=T1))
    assert reviews.summary(1) == (2, 3.5)


def test_list_for_movie_returns_copy(reviews):
    reviews.add(Review(1, "alice", 5, "a", created_at=T1))
    reviews.list_for_movie(1).clear()
    assert len(reviews.list_for_movie(1)) == 1


def test_reviews_survive_reload(tmp_path):
    path = str(tmp_path / "reviews.ser")
    store = ReviewStore(path).init()
    store.add(Review(42, "alice", 5, "great", created_at=T1))
    store.update(42, "alice", T1, 4, "good")

    [review] = ReviewStore(path).init().list_for_movie(42)
    assert (review.username, review.rating, review.text, review.created_at) == ("alice", 4, "good", T1)


def test_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / "reviews.ser"
    path.write_bytes(b"\x80garbage")
    assert ReviewStore(str(path)).init().list_all() == []
