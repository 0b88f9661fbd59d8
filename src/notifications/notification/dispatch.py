"""NotificationDispatcher — sends one push to one user's devices.

At-most-once: there is no retry and no deduplication. Callers decide when a
dispatch happens (one per status-change event); the dispatcher only decides
whether it can be delivered.

Outcomes:
    recipient unknown or without devices  → DispatchResult(NOOP), not an error
    at least one device accepted          → DispatchResult(SENT)
    every device rejected                 → DeliveryFailed

Tokens the push service reports as unregistered are pruned from the
directory so they are not tried again.
"""

import structlog
from pydantic import BaseModel

from notifications.channel import get_push_channel
from notifications.channel.push_port import UNREGISTERED, PushMessage
from notifications.inbox import get_inbox
from notifications.notification.links import absolute_link
from notifications.notification.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from notifications.recipient import get_directory
from shared.config import get_settings
from shared.exceptions import DeliveryFailed

logger = structlog.get_logger(__name__)


class DispatchResult(BaseModel):
    status: NotificationStatus
    notification_id: str
    recipient_id: str
    success_count: int = 0
    failure_count: int = 0
    reason: str | None = None


class NotificationDispatcher:
    """Resolves the recipient, sends the push and records it in the inbox."""

    def __init__(self, directory=None, channel=None, inbox=None, settings=None):
        self.directory = directory or get_directory()
        self.channel = channel or get_push_channel()
        self.inbox = inbox or get_inbox()
        self.settings = settings or get_settings()

    async def dispatch(
        self,
        recipient_user_id: str,
        title: str,
        body: str,
        deep_link: str,
        notification_type: NotificationType = NotificationType.CUSTOM,
        order_id: str | None = None,
    ) -> DispatchResult:
        link = absolute_link(deep_link, self.settings)
        target = await self.directory.get_target(recipient_user_id)
        tokens = target.tokens() if target else []

        if not tokens:
            reason = "unknown recipient" if target is None else "recipient has no registered devices"
            notification = await self._record(
                recipient_user_id, notification_type, title, body, link, order_id,
                status=NotificationStatus.NOOP, failure_reason=reason,
            )
            logger.info(
                "Push skipped, recipient unreachable",
                recipient_id=recipient_user_id,
                notification_type=notification_type.value,
                reason=reason,
            )
            return DispatchResult(
                status=NotificationStatus.NOOP,
                notification_id=notification.id,
                recipient_id=recipient_user_id,
                reason=reason,
            )

        message = PushMessage(
            title=title,
            body=body,
            deep_link=link,
            icon=self.settings.push_icon,
            badge=self.settings.push_badge,
            data={"url": link, "click_action": link, "order_id": order_id or ""},
        )

        successes, failures, unregistered = 0, [], []
        for token in tokens:
            try:
                result = await self.channel.send(token, message)
            except Exception as e:
                result = {"status": "failed", "error": str(e)}
            if result.get("status") == "sent":
                successes += 1
                continue
            failures.append(result.get("error", "Unknown dispatch error"))
            if result.get("code") == UNREGISTERED:
                unregistered.append(token)

        if unregistered:
            await self.directory.prune_tokens(recipient_user_id, unregistered)

        if successes == 0:
            reason = failures[0] if failures else "Unknown dispatch error"
            await self._record(
                recipient_user_id, notification_type, title, body, link, order_id,
                status=NotificationStatus.FAILED, failure_count=len(failures), failure_reason=reason,
            )
            logger.error(
                "Push delivery failed",
                recipient_id=recipient_user_id,
                notification_type=notification_type.value,
                failure_count=len(failures),
                error=reason,
            )
            raise DeliveryFailed(
                f"Push to {recipient_user_id} failed on every device: {reason}",
                recipient_id=recipient_user_id,
                failure_count=len(failures),
            )

        notification = await self._record(
            recipient_user_id, notification_type, title, body, link, order_id,
            status=NotificationStatus.SENT, success_count=successes, failure_count=len(failures),
        )
        logger.info(
            "Push sent",
            recipient_id=recipient_user_id,
            notification_type=notification_type.value,
            success_count=successes,
            failure_count=len(failures),
        )
        return DispatchResult(
            status=NotificationStatus.SENT,
            notification_id=notification.id,
            recipient_id=recipient_user_id,
            success_count=successes,
            failure_count=len(failures),
        )

    async def _record(
        self,
        recipient_id: str,
        notification_type: NotificationType,
        title: str,
        body: str,
        link: str,
        order_id: str | None,
        status: NotificationStatus,
        success_count: int = 0,
        failure_count: int = 0,
        failure_reason: str | None = None,
    ) -> Notification:
        return await self.inbox.record(
            recipient_id=recipient_id,
            notification_type=notification_type.value,
            title=title,
            body=body,
            deep_link=link,
            order_id=order_id,
            status=status.value,
            success_count=success_count,
            failure_count=failure_count,
            failure_reason=failure_reason,
        )
