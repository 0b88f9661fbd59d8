"""Pydantic request/response models for the Notifications API.

API schemas are separate from the Notification aggregate
(anti-corruption pattern).
"""

from datetime import datetime

from pydantic import BaseModel, Field

from notifications.notification.notification import Notification


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class DispatchRequest(BaseModel):
    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    link: str = Field(default="/orders", examples=["/orders/abc123"])


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class DispatchResponse(BaseModel):
    status: str
    notification_id: str
    success_count: int = 0
    failure_count: int = 0
    reason: str | None = None


class NotificationResponse(BaseModel):
    notification_id: str
    notification_type: str
    title: str
    body: str
    deep_link: str
    order_id: str | None = None
    status: str
    read: bool
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            notification_id=notification.id,
            notification_type=notification.notification_type,
            title=notification.title,
            body=notification.body,
            deep_link=notification.deep_link,
            order_id=notification.order_id,
            status=notification.status,
            read=notification.read,
            created_at=notification.created_at,
        )


class NotificationListResponse(BaseModel):
    user_id: str
    unread_count: int
    notifications: list[NotificationResponse]
