"""FastAPI routes for the Ordering domain — checkout, lifecycle and tracking."""

from fastapi import APIRouter, Depends

from ordering.api.dependencies import current_actor
from ordering.api.schemas import (
    CancelOrderRequest,
    OrderResponse,
    PaymentResponse,
    PlaceOrderRequest,
    ReassignDriverRequest,
    TrackingResponse,
    TransitionRequest,
    TransitionResponse,
)
from ordering.order.creation import PlaceOrder, place_order
from ordering.order.order import Actor, ActorRole, OrderItem, ShippingAddress
from ordering.order.state_machine import OrderStateMachine
from ordering.store import get_order_store
from shared.exceptions import Unauthorized
from tracking.view import snapshot

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: PlaceOrderRequest, actor: Actor = Depends(current_actor)) -> OrderResponse:
    if actor.role != ActorRole.BUYER:
        raise Unauthorized("Only buyers can place orders")
    command = PlaceOrder(
        buyer_id=actor.actor_id,
        store_id=body.store_id,
        store_owner_id=body.store_owner_id,
        items=[OrderItem(**item.model_dump()) for item in body.items],
        shipping_address=ShippingAddress(**body.shipping_address.model_dump()),
        delivery_fee=body.delivery_fee,
    )
    order = await place_order(command)
    return OrderResponse.from_order(order)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = await get_order_store().get(order_id)
    return OrderResponse.from_order(order)


@router.put("/{order_id}/status", response_model=TransitionResponse)
async def transition_order(
    order_id: str,
    body: TransitionRequest,
    actor: Actor = Depends(current_actor),
) -> TransitionResponse:
    result = await OrderStateMachine().request_transition(order_id, body.status, actor, reason=body.reason)
    return TransitionResponse(
        order_id=result.order_id,
        from_status=result.from_status,
        to_status=result.to_status,
    )


@router.post("/{order_id}/cancel", response_model=TransitionResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    actor: Actor = Depends(current_actor),
) -> TransitionResponse:
    result = await OrderStateMachine().cancel(order_id, actor, reason=body.reason)
    return TransitionResponse(
        order_id=result.order_id,
        from_status=result.from_status,
        to_status=result.to_status,
    )


@router.post("/{order_id}/payment/confirm", response_model=PaymentResponse)
async def confirm_payment(order_id: str) -> PaymentResponse:
    """Payment provider webhook. Safe to call repeatedly."""
    result = await OrderStateMachine().confirm_payment(order_id)
    return PaymentResponse(
        order_id=result.order_id,
        already_confirmed=result.already_confirmed,
        status=result.order.status,
    )


@router.put("/{order_id}/driver", response_model=OrderResponse)
async def reassign_driver(
    order_id: str,
    body: ReassignDriverRequest,
    actor: Actor = Depends(current_actor),
) -> OrderResponse:
    order = await OrderStateMachine().reassign_driver(order_id, body.driver_id, actor)
    return OrderResponse.from_order(order)


@router.get("/{order_id}/tracking", response_model=TrackingResponse)
async def track_order(order_id: str) -> TrackingResponse:
    order = await get_order_store().get(order_id)
    view = snapshot(order)
    return TrackingResponse(
        order_id=order.id,
        status=view.status,
        label=view.label,
        step=view.step,
        total_steps=view.total_steps,
        position_known=view.position_known,
        latitude=view.position.latitude if view.position else None,
        longitude=view.position.longitude if view.position else None,
        last_update=view.position.last_update if view.position else None,
    )
