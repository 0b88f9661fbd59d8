"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
the internal order record.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ordering.order.order import Order, OrderStatus


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)


class OrderItemSchema(BaseModel):
    product_id: str
    name: str
    quantity: int = Field(ge=1)
    unit_price: float


class DriverCoordsSchema(BaseModel):
    latitude: float
    longitude: float
    last_update: datetime


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    store_id: str
    store_owner_id: str | None = None
    items: list[OrderItemSchema]
    shipping_address: ShippingAddressSchema
    delivery_fee: float | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "store_id": "store-001",
                    "items": [
                        {"product_id": "prod-001", "name": "Empanadas", "quantity": 6, "unit_price": 1.5},
                    ],
                    "shipping_address": {"name": "Ana", "address": "Av. Siempre Viva 742"},
                }
            ]
        }
    }


class TransitionRequest(BaseModel):
    status: OrderStatus
    reason: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"status": "OutForDelivery"}],
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class ReassignDriverRequest(BaseModel):
    driver_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    order_id: str
    status: OrderStatus
    status_label: str
    store_id: str
    buyer_id: str
    assigned_driver_id: str | None = None
    driver_coords: DriverCoordsSchema | None = None
    payment_status: str
    subtotal: float
    delivery_fee: float
    total: float
    cancellation_reason: str | None = None
    version: int

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=order.id,
            status=order.status,
            status_label=order.status.label,
            store_id=order.store_id,
            buyer_id=order.buyer_id,
            assigned_driver_id=order.assigned_driver_id,
            driver_coords=order.driver_coords.model_dump() if order.driver_coords else None,
            payment_status=order.payment_status.value,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total=order.total,
            cancellation_reason=order.cancellation_reason,
            version=order.version,
        )


class TransitionResponse(BaseModel):
    order_id: str
    from_status: OrderStatus
    to_status: OrderStatus


class PaymentResponse(BaseModel):
    order_id: str
    already_confirmed: bool
    status: OrderStatus


class TrackingResponse(BaseModel):
    order_id: str
    status: OrderStatus
    label: str
    step: int | None = None
    total_steps: int
    position_known: bool
    latitude: float | None = None
    longitude: float | None = None
    last_update: datetime | None = None
