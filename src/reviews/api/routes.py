"""FastAPI routes for the Reviews domain."""

from fastapi import APIRouter, Depends

from ordering.api.dependencies import current_actor
from ordering.order.order import Actor
from reviews.api.schemas import RatingSummaryResponse, ReviewResponse, SubmitReviewRequest
from reviews.review.submission import SubmitReview, rating_summary, submit_review

router = APIRouter(tags=["reviews"])


@router.post("/orders/{order_id}/reviews", status_code=201, response_model=ReviewResponse)
async def create_review(
    order_id: str,
    body: SubmitReviewRequest,
    actor: Actor = Depends(current_actor),
) -> ReviewResponse:
    review = await submit_review(
        SubmitReview(
            order_id=order_id,
            author_id=actor.actor_id,
            subject_type=body.subject_type,
            subject_id=body.subject_id,
            rating=body.rating,
            comment=body.comment,
        )
    )
    return ReviewResponse(
        review_id=review.id,
        order_id=review.order_id,
        subject_type=review.subject_type,
        subject_id=review.subject_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )


@router.get("/reviews/subjects/{subject_id}/summary", response_model=RatingSummaryResponse)
async def get_rating_summary(subject_id: str) -> RatingSummaryResponse:
    summary = await rating_summary(subject_id)
    return RatingSummaryResponse(**summary.model_dump())
