"""Pydantic request/response models for the Reviews API."""

from datetime import datetime

from pydantic import BaseModel, Field

from reviews.review.review import SubjectType


class SubmitReviewRequest(BaseModel):
    subject_type: SubjectType
    subject_id: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"subject_type": "Driver", "subject_id": "driver-001", "rating": 5, "comment": "Rápido y amable"}
            ]
        }
    }


class ReviewResponse(BaseModel):
    review_id: str
    order_id: str
    subject_type: SubjectType
    subject_id: str
    rating: int
    comment: str | None = None
    created_at: datetime


class RatingSummaryResponse(BaseModel):
    subject_id: str
    review_count: int
    average_rating: float | None = None
    distribution: dict[int, int]
