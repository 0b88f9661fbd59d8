"""Notification inbox backed by the Notifications domain's repository.

Storage is whatever provider the domain is configured with (the memory
provider by default). Each call runs in its own domain context, so
delivery tasks spawned by event handlers can record outcomes after the
handler's context is gone.
"""

from notifications.domain import notifications
from notifications.notification.notification import Notification
from protean.exceptions import ObjectNotFoundError
from shared.exceptions import NotificationNotFound


class NotificationInbox:
    async def record(self, **fields) -> Notification:
        """Create and store one unread notification."""
        with notifications.domain_context():
            notification = Notification.record(**fields)
            notifications.repository_for(Notification).add(notification)
        return notification

    async def add(self, notification: Notification) -> Notification:
        with notifications.domain_context():
            notifications.repository_for(Notification).add(notification)
        return notification

    async def list_for(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """Newest first."""
        with notifications.domain_context():
            items = (
                notifications.repository_for(Notification)
                .query.filter(recipient_id=user_id)
                .order_by("created_at")
                .limit(None)
                .all()
                .items
            )
        items = list(reversed(items))
        if unread_only:
            items = [n for n in items if not n.read]
        return items

    async def mark_read(self, notification_id: str) -> Notification:
        with notifications.domain_context():
            repo = notifications.repository_for(Notification)
            try:
                notification = repo.get(notification_id)
            except ObjectNotFoundError:
                raise NotificationNotFound(
                    f"Notification {notification_id} not found",
                    notification_id=notification_id,
                ) from None
            notification.mark_read()
            repo.add(notification)
        return notification
