"""Ordering events derived from accepted writes to the order record.

The order store calls ``announce_write`` inside every accepted write. The
record before and after the write says what happened:

    created                          → OrderPlaced
    payment Unpaid → Paid            → PaymentConfirmed
    status changed                   → OrderStatusChanged
    same status, claim moved         → DriverReassigned

Writers therefore never publish on their own. A caller that is cancelled
while awaiting its write cannot drop the event the write owes.
"""

from datetime import UTC, datetime

import structlog
from protean.core.event import BaseEvent

from ordering.domain import ordering
from ordering.order.order import Actor, Order
from shared.events.ordering import (
    DriverReassigned,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
)
from shared.events.relay import get_relay

logger = structlog.get_logger(__name__)

ordering.register_external_event(OrderPlaced, "Ordering.OrderPlaced.v1")
ordering.register_external_event(PaymentConfirmed, "Ordering.PaymentConfirmed.v1")
ordering.register_external_event(OrderStatusChanged, "Ordering.OrderStatusChanged.v1")
ordering.register_external_event(DriverReassigned, "Ordering.DriverReassigned.v1")


def events_for_write(before: Order | None, after: Order) -> list[BaseEvent]:
    if before is None:
        return [
            OrderPlaced(
                order_id=after.id,
                buyer_id=after.buyer_id,
                store_id=after.store_id,
                store_owner_id=after.store_owner_id,
                total=after.total,
                buyer_name=after.shipping_address.name,
                placed_at=after.created_at or datetime.now(UTC),
            )
        ]

    events: list[BaseEvent] = []
    if not before.is_paid and after.is_paid:
        events.append(
            PaymentConfirmed(
                order_id=after.id,
                buyer_id=after.buyer_id,
                store_id=after.store_id,
                store_owner_id=after.store_owner_id,
                total=after.total,
                confirmed_at=after.paid_at or after.updated_at,
            )
        )

    if before.status != after.status:
        actor = after.status_changed_by or Actor.system()
        events.append(
            OrderStatusChanged(
                order_id=after.id,
                from_status=before.status.value,
                to_status=after.status.value,
                actor_id=actor.actor_id,
                actor_role=actor.role.value,
                buyer_id=after.buyer_id,
                store_id=after.store_id,
                store_owner_id=after.store_owner_id,
                assigned_driver_id=after.assigned_driver_id,
                reason=after.status_reason,
                occurred_at=after.updated_at,
            )
        )
    elif (
        before.assigned_driver_id
        and after.assigned_driver_id
        and before.assigned_driver_id != after.assigned_driver_id
    ):
        events.append(
            DriverReassigned(
                order_id=after.id,
                previous_driver_id=before.assigned_driver_id,
                new_driver_id=after.assigned_driver_id,
                buyer_id=after.buyer_id,
                occurred_at=after.updated_at,
            )
        )

    return events


def announce_write(before: Order | None, after: Order) -> None:
    """Publish the events a write owes. Registered as an order store write listener."""
    with ordering.domain_context():
        events = events_for_write(before, after)

    relay = get_relay()
    for event in events:
        logger.debug("Ordering event emitted", order_id=after.id, event_type=event.__class__.__type__)
        relay.publish(event)
