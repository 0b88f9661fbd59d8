"""Order creation — checkout command and handler."""

from datetime import UTC, datetime
from uuid import uuid4

import structlog
from pydantic import BaseModel, Field

from ordering.order.order import Order, OrderItem, OrderStatus, PaymentStatus, ShippingAddress
from ordering.store import get_order_store
from shared.config import get_settings
from shared.exceptions import InvalidOrder

logger = structlog.get_logger(__name__)


class PlaceOrder(BaseModel):
    buyer_id: str = Field(min_length=1)
    store_id: str = Field(min_length=1)
    store_owner_id: str | None = None
    items: list[OrderItem] = Field(default_factory=list)
    shipping_address: ShippingAddress
    delivery_fee: float | None = None


async def place_order(command: PlaceOrder, store=None, settings=None) -> Order:
    """Store a new order in ``Created``/``Unpaid``.

    The store announces ``OrderPlaced`` as part of the create.

    Raises:
        InvalidOrder: empty cart, non-positive price or negative fee.
    """
    store = store or get_order_store()
    settings = settings or get_settings()

    if not command.items:
        raise InvalidOrder("An order needs at least one item", buyer_id=command.buyer_id)
    for item in command.items:
        if item.unit_price <= 0:
            raise InvalidOrder(
                f"Item {item.product_id} has a non-positive price",
                product_id=item.product_id,
            )

    delivery_fee = settings.default_delivery_fee if command.delivery_fee is None else command.delivery_fee
    if delivery_fee < 0:
        raise InvalidOrder("Delivery fee cannot be negative", delivery_fee=delivery_fee)

    subtotal = round(sum(item.line_total for item in command.items), 2)
    now = datetime.now(UTC)
    order = await store.create(
        Order(
            id=uuid4().hex,
            status=OrderStatus.CREATED,
            store_id=command.store_id,
            store_owner_id=command.store_owner_id,
            buyer_id=command.buyer_id,
            payment_status=PaymentStatus.UNPAID,
            items=command.items,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=round(subtotal + delivery_fee, 2),
            shipping_address=command.shipping_address,
            created_at=now,
            updated_at=now,
        )
    )

    logger.info("Order placed", order_id=order.id, buyer_id=order.buyer_id, total=order.total)
    return order
