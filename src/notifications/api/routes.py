"""FastAPI routes for the Notifications domain.

Thin adapters over the dispatcher and the inbox. No business logic — just
schema→call→response translation.
"""

from fastapi import APIRouter

from notifications.api.schemas import (
    DispatchRequest,
    DispatchResponse,
    NotificationListResponse,
    NotificationResponse,
)
from notifications.inbox import get_inbox
from notifications.notification.dispatch import NotificationDispatcher

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/dispatch", response_model=DispatchResponse)
async def dispatch_notification(body: DispatchRequest) -> DispatchResponse:
    """Send an ad-hoc push to one user. A user without devices is not an error."""
    result = await NotificationDispatcher().dispatch(body.user_id, body.title, body.body, body.link)
    return DispatchResponse(
        status=result.status.value,
        notification_id=result.notification_id,
        success_count=result.success_count,
        failure_count=result.failure_count,
        reason=result.reason,
    )


@router.get("/{user_id}", response_model=NotificationListResponse)
async def list_notifications(user_id: str, unread_only: bool = False) -> NotificationListResponse:
    inbox = get_inbox()
    items = await inbox.list_for(user_id, unread_only=unread_only)
    unread = items if unread_only else [n for n in items if not n.read]
    return NotificationListResponse(
        user_id=user_id,
        unread_count=len(unread),
        notifications=[NotificationResponse.from_notification(n) for n in items],
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(notification_id: str) -> NotificationResponse:
    notification = await get_inbox().mark_read(notification_id)
    return NotificationResponse.from_notification(notification)
