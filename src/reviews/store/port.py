"""Review store port."""

from abc import ABC, abstractmethod

from reviews.review.review import Review


class ReviewStore(ABC):
    """Abstract interface for review store adapters."""

    @abstractmethod
    async def create_if_absent(self, review: Review) -> tuple[Review, bool]:
        """Store ``review`` unless its id is taken. Returns the stored review and whether it was created."""
        ...

    @abstractmethod
    async def list_for_subject(self, subject_id: str) -> list[Review]: ...
