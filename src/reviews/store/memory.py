"""In-memory review store for tests and development."""

import asyncio

from reviews.review.review import Review
from reviews.store.port import ReviewStore


class InMemoryReviewStore(ReviewStore):
    def __init__(self):
        self._reviews: dict[str, Review] = {}
        self._lock: asyncio.Lock | None = None

    async def create_if_absent(self, review: Review) -> tuple[Review, bool]:
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            existing = self._reviews.get(review.id)
            if existing is not None:
                return existing, False
            self._reviews[review.id] = review
            return review, True

    async def list_for_subject(self, subject_id: str) -> list[Review]:
        return [r for r in self._reviews.values() if r.subject_id == subject_id]

    def reset(self):
        self._reviews.clear()
        self._lock = None
