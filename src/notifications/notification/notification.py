"""Notification aggregate — one dispatch attempt to one user.

Every dispatch lands in the recipient's inbox, whatever happened to the push:
the in-app bell shows it even when the user has no registered device.

Status:
    SENT    at least one device accepted the push
    NOOP    recipient has no registered device (nothing to deliver to)
    FAILED  every device rejected the push
"""

from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER_REQUEST = "OrderRequest"
    PAYMENT_RECEIVED = "PaymentReceived"
    PAYMENT_RECEIPT = "PaymentReceipt"
    ORDER_PREPARING = "OrderPreparing"
    OUT_FOR_DELIVERY = "OutForDelivery"
    ORDER_DELIVERED = "OrderDelivered"
    ORDER_CANCELLED = "OrderCancelled"
    DRIVER_ASSIGNED = "DriverAssigned"
    CUSTOM = "Custom"


class NotificationStatus(Enum):
    SENT = "Sent"
    NOOP = "NoOp"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifications.aggregate
class Notification:
    """A push attempt as the recipient's bell shows it."""

    # Recipient
    recipient_id: Identifier(required=True)
    order_id: Identifier()

    # Content, stored exactly as pushed
    notification_type: String(choices=NotificationType, default=NotificationType.CUSTOM.value)
    title: String(required=True, max_length=255, sanitize=False)
    body: Text(required=True, sanitize=False)
    deep_link: String(required=True, max_length=2000, sanitize=False)

    # Delivery outcome
    status: String(choices=NotificationStatus, required=True)
    success_count: Integer(default=0)
    failure_count: Integer(default=0)
    failure_reason: Text(sanitize=False)

    # Bell state
    read: Boolean(default=False)
    created_at: DateTime()
    read_at: DateTime()

    @classmethod
    def record(
        cls,
        recipient_id,
        title,
        body,
        deep_link,
        status,
        notification_type=NotificationType.CUSTOM.value,
        order_id=None,
        success_count=0,
        failure_count=0,
        failure_reason=None,
    ):
        """Create an unread inbox entry for one dispatch outcome."""
        return cls(
            recipient_id=recipient_id,
            order_id=order_id,
            notification_type=notification_type,
            title=title,
            body=body,
            deep_link=deep_link,
            status=status,
            success_count=success_count,
            failure_count=failure_count,
            failure_reason=failure_reason,
            read=False,
            created_at=datetime.now(UTC),
        )

    def mark_read(self) -> None:
        if self.read:
            return
        self.read = True
        self.read_at = datetime.now(UTC)
