"""Order record — the shared document every actor reads and writes.

The order lives in an external document store; this module only defines its
shape and the rules that decide which status changes are legal. Writes go
through ``OrderStateMachine`` (status, driver claim, payment) or through the
location publisher (``driver_coords`` only).

State Machine:
    CREATED → PREPARING → OUT_FOR_DELIVERY → DELIVERED
    {CREATED, PREPARING} → CANCELLED
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CREATED = "Created"
    PREPARING = "Preparing"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


class PaymentStatus(Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class ActorRole(Enum):
    BUYER = "buyer"
    STORE = "store"
    DRIVER = "driver"
    ADMIN = "admin"
    SYSTEM = "system"


_STATUS_LABELS = {
    OrderStatus.CREATED: "Pedido Realizado",
    OrderStatus.PREPARING: "En preparación",
    OrderStatus.OUT_FOR_DELIVERY: "En reparto",
    OrderStatus.DELIVERED: "Entregado",
    OrderStatus.CANCELLED: "Cancelado",
}

# Forward chain: each status is reachable only from its immediate predecessor.
FORWARD_CHAIN = (
    OrderStatus.CREATED,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

_VALID_TRANSITIONS = {
    OrderStatus.CREATED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

# Roles allowed on each edge. Ownership (which store, which driver) is
# checked by the state machine against the record itself.
EDGE_ROLES = {
    (OrderStatus.CREATED, OrderStatus.PREPARING): {ActorRole.STORE, ActorRole.SYSTEM},
    (OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY): {ActorRole.DRIVER},
    (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED): {ActorRole.DRIVER},
    (OrderStatus.CREATED, OrderStatus.CANCELLED): {ActorRole.BUYER, ActorRole.STORE, ActorRole.ADMIN},
    (OrderStatus.PREPARING, OrderStatus.CANCELLED): {ActorRole.STORE, ActorRole.ADMIN},
}


def is_valid_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """True if ``requested`` may directly follow ``current``."""
    return requested in _VALID_TRANSITIONS.get(current, set())


def is_terminal(status: OrderStatus) -> bool:
    return not _VALID_TRANSITIONS.get(status)


def next_status(current: OrderStatus) -> OrderStatus | None:
    """The forward successor of ``current``, or None at the end of the chain."""
    if current not in FORWARD_CHAIN:
        return None
    index = FORWARD_CHAIN.index(current)
    return FORWARD_CHAIN[index + 1] if index + 1 < len(FORWARD_CHAIN) else None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
class Actor(BaseModel):
    """Whoever asks for a change: a user id plus the role it acts in."""

    actor_id: str = Field(min_length=1)
    role: ActorRole

    @classmethod
    def system(cls) -> "Actor":
        return cls(actor_id="system", role=ActorRole.SYSTEM)


class DriverCoords(BaseModel):
    """Last reported driver position.

    ``last_update`` is when the position was written to the order record and
    drives freshness. ``sampled_at`` is when the device took the fix.
    """

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    last_update: datetime
    sampled_at: datetime | None = None

    def is_fresh(self, max_age: timedelta, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return now - self.last_update <= max_age


class ShippingAddress(BaseModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)


class OrderItem(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int = Field(ge=1)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Order record
# ---------------------------------------------------------------------------
class Order(BaseModel):
    id: str
    status: OrderStatus = OrderStatus.CREATED
    store_id: str
    store_owner_id: str | None = None
    buyer_id: str
    assigned_driver_id: str | None = None
    driver_coords: DriverCoords | None = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    paid_at: datetime | None = None
    items: list[OrderItem] = Field(default_factory=list)
    subtotal: float = 0.0
    delivery_fee: float = 0.0
    total: float = 0.0
    shipping_address: ShippingAddress
    cancellation_reason: str | None = None
    status_changed_by: Actor | None = None
    status_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    @property
    def store_recipient_id(self) -> str:
        """User who receives store-side notifications."""
        return self.store_owner_id or self.store_id

    def is_store_actor(self, actor: Actor) -> bool:
        return actor.role == ActorRole.STORE and actor.actor_id in {self.store_id, self.store_owner_id}

    def is_assigned_driver(self, user_id: str | None) -> bool:
        return user_id is not None and self.assigned_driver_id == user_id

    def known_position(self, max_age: timedelta, now: datetime | None = None) -> DriverCoords | None:
        """Driver position a consumer may trust, or None for "position unknown"."""
        if self.status != OrderStatus.OUT_FOR_DELIVERY or self.driver_coords is None:
            return None
        if not self.driver_coords.is_fresh(max_age, now):
            return None
        return self.driver_coords
