"""Review record — a buyer's rating of a driver or a product after delivery.

Immutable once written. The id is derived from the order, the subject type
and the subject, so one order can review each subject exactly once.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SubjectType(Enum):
    DRIVER = "Driver"
    PRODUCT = "Product"


def review_id(order_id: str, subject_type: SubjectType, subject_id: str) -> str:
    return f"{order_id}:{subject_type.value}:{subject_id}"


class Review(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    order_id: str
    author_id: str
    subject_type: SubjectType
    subject_id: str
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RatingSummary(BaseModel):
    subject_id: str
    review_count: int
    average_rating: float | None = None
    distribution: dict[int, int] = Field(default_factory=dict)
