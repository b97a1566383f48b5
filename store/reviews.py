"""
Review store: per-movie lists of user star ratings and reviews.

A review is identified by ``(movie_id, username, created_at)``; there is no
surrogate id. Updates keep the original ``created_at``.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple

from config import REVIEWS_FILE
from .persistence import load_pickle, save_pickle

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def clamp_rating(rating: int) -> int:
    return max(MIN_RATING, min(MAX_RATING, int(rating)))


def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class Review:
    movie_id: int
    username: str
    rating: int
    text: str
    created_at: int = field(default_factory=_now_millis)  # epoch milliseconds

    def __post_init__(self):
        self.movie_id = int(self.movie_id)
        self.rating = clamp_rating(self.rating)

    @property
    def key(self) -> Tuple[int, str, int]:
        return self.movie_id, self.username, self.created_at

    def __str__(self):
        return f"Rating: {self.rating}/5 by {self.username}\nReview: {self.text}"


class ReviewStore:
    """movie_id -> [Review, ...] persisted as one pickled file"""

    def __init__(self, reviews_file: str = REVIEWS_FILE):
        self.reviews_file = reviews_file
        self.movie_reviews: Dict[int, List[Review]] = {}

    def init(self) -> "ReviewStore":
        self.movie_reviews = load_pickle(self.reviews_file, dict, dict)
        logger.info(f"Loaded reviews for {len(self.movie_reviews)} movies from {self.reviews_file}")
        return self

    def flush(self) -> bool:
        return save_pickle(self.reviews_file, self.movie_reviews)

    def _find(self, movie_id: int, username: str, created_at: int) -> int:
        for idx, review in enumerate(self.movie_reviews.get(movie_id, [])):
            if review.username == username and review.created_at == created_at:
                return idx
        return -1

    def add(self, review: Review) -> Review:
        """
        Append a review to its movie and persist.

        If another live review already has the same key (same user, same
        millisecond) the new one's ``created_at`` is moved forward until the
        key is unique. Returns the review as stored.
        """
        while self._find(review.movie_id, review.username, review.created_at) >= 0:
            review = replace(review, created_at=review.created_at + 1)

        self.movie_reviews.setdefault(review.movie_id, []).append(review)
        self.flush()
        return review

    def list_for_movie(self, movie_id: int) -> List[Review]:
        return list(self.movie_reviews.get(int(movie_id), []))

    def list_all(self) -> List[Review]:
        return [review for reviews in self.movie_reviews.values() for review in reviews]

    def movie_ids(self) -> List[int]:
        return list(self.movie_reviews)

    def summary(self, movie_id: int) -> Tuple[int, float]:
        """(number of reviews, average rating) for a movie"""
        reviews = self.movie_reviews.get(int(movie_id), [])
        if not reviews:
            return 0, 0.0
        return len(reviews), round(sum(r.rating for r in reviews) / len(reviews), 1)

    def update(self, movie_id: int, username: str, created_at: int, new_rating: int, new_text: str) -> bool:
        movie_id = int(movie_id)
        idx = self._find(movie_id, username, created_at)
        if idx < 0:
            return False

        reviews = self.movie_reviews[movie_id]
        reviews[idx] = Review(movie_id, username, new_rating, new_text, created_at=created_at)
        self.flush()
        return True

    def delete(self, movie_id: int, username: str, created_at: int) -> bool:
        movie_id = int(movie_id)
        idx = self._find(movie_id, username, created_at)
        if idx < 0:
            return False

        reviews = self.movie_reviews[movie_id]
        del reviews[idx]
        if not reviews:
            del self.movie_reviews[movie_id]
        self.flush()
        return True
