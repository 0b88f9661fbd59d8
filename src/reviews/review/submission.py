"""SubmitReview — rate the driver or a product of a delivered order.

Enforces one review per order per subject through the store's
create-if-absent on the deterministic review id, so two concurrent
submissions cannot both succeed.
"""

import structlog
from pydantic import BaseModel, Field

from ordering.order.order import OrderStatus
from ordering.store import get_order_store
from reviews.review.review import RatingSummary, Review, SubjectType, review_id
from reviews.store import get_review_store
from shared.exceptions import ReviewAlreadySubmitted, ReviewNotAllowed, Unauthorized

logger = structlog.get_logger(__name__)


class SubmitReview(BaseModel):
    order_id: str
    author_id: str
    subject_type: SubjectType
    subject_id: str
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


async def submit_review(command: SubmitReview, order_store=None, review_store=None) -> Review:
    order_store = order_store or get_order_store()
    review_store = review_store or get_review_store()

    order = await order_store.get(command.order_id)
    if order.buyer_id != command.author_id:
        raise Unauthorized("Only the buyer can review an order", order_id=order.id)
    if order.status != OrderStatus.DELIVERED:
        raise ReviewNotAllowed(
            f"Order {order.id} is {order.status.value}; reviews open after delivery",
            order_id=order.id,
        )
    if command.subject_type == SubjectType.DRIVER and command.subject_id != order.assigned_driver_id:
        raise ReviewNotAllowed(f"Driver {command.subject_id} did not deliver order {order.id}", order_id=order.id)
    if command.subject_type == SubjectType.PRODUCT and command.subject_id not in {i.product_id for i in order.items}:
        raise ReviewNotAllowed(f"Product {command.subject_id} is not part of order {order.id}", order_id=order.id)

    review, created = await review_store.create_if_absent(
        Review(
            id=review_id(order.id, command.subject_type, command.subject_id),
            order_id=order.id,
            author_id=command.author_id,
            subject_type=command.subject_type,
            subject_id=command.subject_id,
            rating=command.rating,
            comment=command.comment,
        )
    )
    if not created:
        raise ReviewAlreadySubmitted(
            f"Order {order.id} already reviewed this {command.subject_type.value.lower()}",
            order_id=order.id,
            subject_id=command.subject_id,
        )

    logger.info(
        "Review submitted",
        order_id=order.id,
        subject_type=command.subject_type.value,
        subject_id=command.subject_id,
        rating=command.rating,
    )
    return review


async def rating_summary(subject_id: str, review_store=None) -> RatingSummary:
    review_store = review_store or get_review_store()
    reviews = await review_store.list_for_subject(subject_id)
    if not reviews:
        return RatingSummary(subject_id=subject_id, review_count=0)

    distribution = {stars: 0 for stars in range(1, 6)}
    for review in reviews:
        distribution[review.rating] += 1
    return RatingSummary(
        subject_id=subject_id,
        review_count=len(reviews),
        average_rating=round(sum(r.rating for r in reviews) / len(reviews), 2),
        distribution=distribution,
    )
