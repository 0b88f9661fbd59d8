"""Inbound cross-domain event handler — Notifications reacts to Ordering events.

One dispatch per recipient per event, never more:

    OrderPlaced             → store          "new request"
    PaymentConfirmed        → store, buyer   "paid" / "receipt"
    OrderStatusChanged
        Preparing           → buyer
        OutForDelivery      → buyer
        Delivered           → buyer
        Cancelled           → whoever did not cancel (both, for an admin)
    DriverReassigned        → the new driver

Handlers run synchronously inside the order write that raised the event, so
they only decide who is told what. The pushes themselves run as background
deliveries on the running loop; ``drain_deliveries`` waits for them.

Dispatch errors stop here. The transition that raised the event is already
committed and must not be reported as failed because a push was not
delivered.
"""

import asyncio

import structlog
from notifications.domain import notifications
from notifications.notification.dispatch import NotificationDispatcher
from notifications.notification.links import order_link, orders_link
from notifications.notification.notification import NotificationType
from notifications.templates import get_template
from protean.utils.mixins import handle
from shared.events.ordering import (
    DriverReassigned,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
)
from shared.exceptions import DeliveryFailed

logger = structlog.get_logger(__name__)

notifications.register_external_event(OrderPlaced, "Ordering.OrderPlaced.v1")
notifications.register_external_event(PaymentConfirmed, "Ordering.PaymentConfirmed.v1")
notifications.register_external_event(OrderStatusChanged, "Ordering.OrderStatusChanged.v1")
notifications.register_external_event(DriverReassigned, "Ordering.DriverReassigned.v1")

_STATUS_NOTIFICATIONS = {
    "Preparing": NotificationType.ORDER_PREPARING,
    "OutForDelivery": NotificationType.OUT_FOR_DELIVERY,
    "Delivered": NotificationType.ORDER_DELIVERED,
}

_deliveries: set[asyncio.Task] = set()


@notifications.event_handler(stream_category="ordering::order")
class OrderingEventsHandler:
    """Reacts to Ordering domain events to push notifications to the parties involved."""

    def __init__(self, dispatcher: NotificationDispatcher | None = None):
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> NotificationDispatcher:
        if self._dispatcher is None:
            self._dispatcher = NotificationDispatcher()
        return self._dispatcher

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        """Tell the store a new order is waiting."""
        self._schedule(
            event,
            [
                (
                    event.store_owner_id or event.store_id,
                    NotificationType.ORDER_REQUEST,
                    orders_link(),
                ),
            ],
            {"order_id": event.order_id, "total": event.total, "buyer_name": event.buyer_name},
        )

    @handle(PaymentConfirmed)
    def on_payment_confirmed(self, event: PaymentConfirmed) -> None:
        self._schedule(
            event,
            [
                (event.store_owner_id or event.store_id, NotificationType.PAYMENT_RECEIVED, orders_link()),
                (event.buyer_id, NotificationType.PAYMENT_RECEIPT, order_link(event.order_id)),
            ],
            {"order_id": event.order_id, "total": event.total},
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        link = order_link(event.order_id)
        if event.to_status in _STATUS_NOTIFICATIONS:
            deliveries = [(event.buyer_id, _STATUS_NOTIFICATIONS[event.to_status], link)]
        elif event.to_status == "Cancelled":
            deliveries = [
                (recipient_id, NotificationType.ORDER_CANCELLED, link)
                for recipient_id in self._cancellation_recipients(event)
            ]
        else:
            return
        self._schedule(event, deliveries, {"order_id": event.order_id, "reason": event.reason})

    @handle(DriverReassigned)
    def on_driver_reassigned(self, event: DriverReassigned) -> None:
        self._schedule(
            event,
            [(event.new_driver_id, NotificationType.DRIVER_ASSIGNED, order_link(event.order_id))],
            {"order_id": event.order_id},
        )

    @staticmethod
    def _cancellation_recipients(event: OrderStatusChanged) -> list[str]:
        store_recipient = event.store_owner_id or event.store_id
        if event.actor_role == "buyer":
            return [store_recipient]
        if event.actor_role == "store":
            return [event.buyer_id]
        return [event.buyer_id, store_recipient]

    def _schedule(self, event, deliveries: list[tuple], context: dict) -> None:
        task = asyncio.get_running_loop().create_task(self._deliver(event.order_id, deliveries, context))
        _deliveries.add(task)
        task.add_done_callback(_deliveries.discard)

    async def _deliver(self, order_id: str, deliveries: list[tuple], context: dict) -> None:
        for recipient_id, notification_type, deep_link in deliveries:
            await self._notify(recipient_id, notification_type, context, deep_link, order_id)

    async def _notify(
        self,
        recipient_id: str,
        notification_type: NotificationType,
        context: dict,
        deep_link: str,
        order_id: str,
    ) -> None:
        rendered = get_template(notification_type.value).render(context)
        try:
            await self.dispatcher.dispatch(
                recipient_id,
                rendered["title"],
                rendered["body"],
                deep_link,
                notification_type=notification_type,
                order_id=order_id,
            )
        except DeliveryFailed as e:
            logger.warning(
                "Notification not delivered",
                order_id=order_id,
                recipient_id=recipient_id,
                notification_type=notification_type.value,
                error=e.message,
            )
        except Exception:
            logger.exception(
                "Notification dispatch error",
                order_id=order_id,
                recipient_id=recipient_id,
                notification_type=notification_type.value,
            )


def pending_deliveries() -> int:
    return len(_deliveries)


async def drain_deliveries(timeout: float | None = None) -> None:
    """Wait for in-flight deliveries, including ones scheduled meanwhile."""
    while _deliveries:
        _, pending = await asyncio.wait(set(_deliveries), timeout=timeout)
        if pending:
            logger.warning("Notification deliveries still running after drain timeout", count=len(pending))
            return


def reset_deliveries() -> None:
    """Forget tracked deliveries (useful for testing, where each test has its own loop)."""
    _deliveries.clear()
