"""Cross-domain event contracts for Ordering domain events.

These classes define the event shape for consumption by other domains
(the Notifications domain dispatches pushes from them; the Tracking domain
only reads the order record). They are registered as external events via
domain.register_external_event() with matching __type__ strings in both the
emitting and the consuming domain. Status fields carry ``OrderStatus``
values as plain strings so consumers do not import ordering internals.

Events are derived by ``ordering.order.events`` from the write they describe,
inside the store's write, so an accepted write is always announced.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class OrderPlaced(BaseEvent):
    """A buyer checked out; the order exists in ``Created``."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    store_id = Identifier(required=True)
    store_owner_id = Identifier()
    total = Float(required=True)
    buyer_name = String(max_length=255, sanitize=False)
    placed_at = DateTime(required=True)


class OrderStatusChanged(BaseEvent):
    """An accepted transition, emitted once per applied status change."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True, max_length=50)
    to_status = String(required=True, max_length=50)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=50)
    buyer_id = Identifier(required=True)
    store_id = Identifier(required=True)
    store_owner_id = Identifier()
    assigned_driver_id = Identifier()
    reason = Text(sanitize=False)
    occurred_at = DateTime(required=True)


class PaymentConfirmed(BaseEvent):
    """Payment flipped from unpaid to paid. Never re-emitted for the same order."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    store_id = Identifier(required=True)
    store_owner_id = Identifier()
    total = Float(required=True)
    confirmed_at = DateTime(required=True)


class DriverReassigned(BaseEvent):
    """An admin moved a claimed order to another driver."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_driver_id = Identifier(required=True)
    new_driver_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    occurred_at = DateTime(required=True)
