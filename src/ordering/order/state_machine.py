"""OrderStateMachine — the only writer of ``status``, the driver claim and payment.

Every operation is an optimistic check-then-write: read the record, validate
the request against it, then issue a conditional write whose ``expected``
values pin the state the validation saw. If another actor got there first
the store rejects the write and the conflict is reported as
``AlreadyClaimed`` or ``InvalidTransition``.

The state machine never publishes. Each accepted write carries who made the
change and why (``status_changed_by``, ``status_reason``), and the order
store announces the matching event from inside the write itself
(see ``ordering.order.events``).
"""

from datetime import UTC, datetime

import structlog
from pydantic import BaseModel

from ordering.order.order import (
    EDGE_ROLES,
    Actor,
    ActorRole,
    Order,
    OrderStatus,
    PaymentStatus,
    is_valid_transition,
)
from ordering.store import get_order_store
from shared.config import get_settings
from shared.exceptions import (
    AlreadyClaimed,
    InvalidTransition,
    StaleRecord,
    Unauthorized,
)
from shared.logging import order_context

logger = structlog.get_logger(__name__)


class TransitionResult(BaseModel):
    order_id: str
    from_status: OrderStatus
    to_status: OrderStatus
    order: Order


class PaymentResult(BaseModel):
    order_id: str
    already_confirmed: bool
    auto_advanced: bool = False
    order: Order


class OrderStateMachine:
    def __init__(self, store=None, settings=None):
        self.store = store or get_order_store()
        self.settings = settings or get_settings()

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    async def request_transition(
        self,
        order_id: str,
        requested_status: OrderStatus | str,
        actor: Actor,
        reason: str | None = None,
    ) -> TransitionResult:
        """Validate and apply one status change on behalf of ``actor``.

        Raises:
            OrderNotFound, InvalidTransition, Unauthorized, AlreadyClaimed
        """
        with order_context(order_id, actor_id=actor.actor_id, actor_role=actor.role.value):
            return await self._request_transition(order_id, requested_status, actor, reason)

    async def _request_transition(
        self,
        order_id: str,
        requested_status: OrderStatus | str,
        actor: Actor,
        reason: str | None,
    ) -> TransitionResult:
        try:
            requested = OrderStatus(requested_status)
        except ValueError:
            raise InvalidTransition(
                f"Unknown order status {requested_status!r}",
                order_id=order_id,
                to_status=str(requested_status),
            ) from None

        order = await self.store.get(order_id)
        current = order.status

        if self._is_foreign_claim(order, requested, actor):
            raise AlreadyClaimed(
                f"Order {order_id} was already claimed by another driver",
                order_id=order_id,
            )
        if not is_valid_transition(current, requested):
            raise InvalidTransition(
                f"Cannot transition from {current.value} to {requested.value}",
                order_id=order_id,
                from_status=current.value,
                to_status=requested.value,
            )
        self._authorize(order, current, requested, actor)

        fields, expected = self._write_plan(order, current, requested, actor, reason)
        try:
            updated = await self.store.update(order_id, fields, expected=expected)
        except StaleRecord:
            await self._raise_conflict(order_id, current, requested, actor)

        logger.info("Order status changed", from_status=current.value, to_status=requested.value)
        return TransitionResult(order_id=order_id, from_status=current, to_status=requested, order=updated)

    async def cancel(self, order_id: str, actor: Actor, reason: str | None = None) -> TransitionResult:
        return await self.request_transition(order_id, OrderStatus.CANCELLED, actor, reason=reason)

    @staticmethod
    def _is_foreign_claim(order: Order, requested: OrderStatus, actor: Actor) -> bool:
        return (
            requested == OrderStatus.OUT_FOR_DELIVERY
            and actor.role == ActorRole.DRIVER
            and order.assigned_driver_id is not None
            and order.assigned_driver_id != actor.actor_id
        )

    @staticmethod
    def _authorize(order: Order, current: OrderStatus, requested: OrderStatus, actor: Actor) -> None:
        allowed = EDGE_ROLES.get((current, requested), set())
        if actor.role not in allowed:
            raise Unauthorized(
                f"Role {actor.role.value} may not move an order from {current.value} to {requested.value}",
                order_id=order.id,
            )
        if actor.role == ActorRole.STORE and not order.is_store_actor(actor):
            raise Unauthorized(f"Store {actor.actor_id} does not own order {order.id}", order_id=order.id)
        if actor.role == ActorRole.BUYER and actor.actor_id != order.buyer_id:
            raise Unauthorized(f"User {actor.actor_id} did not place order {order.id}", order_id=order.id)
        if requested == OrderStatus.DELIVERED and not order.is_assigned_driver(actor.actor_id):
            raise Unauthorized(
                f"Only the assigned driver may deliver order {order.id}",
                order_id=order.id,
            )

    @staticmethod
    def _write_plan(
        order: Order,
        current: OrderStatus,
        requested: OrderStatus,
        actor: Actor,
        reason: str | None,
    ) -> tuple[dict, dict]:
        fields: dict = {"status": requested, "status_changed_by": actor, "status_reason": reason}
        expected: dict = {"status": current}

        if requested == OrderStatus.OUT_FOR_DELIVERY:
            # First writer wins: the claim only lands if nobody else claimed since our read
            fields["assigned_driver_id"] = actor.actor_id
            expected["assigned_driver_id"] = order.assigned_driver_id
        elif requested == OrderStatus.DELIVERED:
            expected["assigned_driver_id"] = actor.actor_id
        elif requested == OrderStatus.CANCELLED:
            fields["cancellation_reason"] = reason

        return fields, expected

    async def _raise_conflict(
        self,
        order_id: str,
        current: OrderStatus,
        requested: OrderStatus,
        actor: Actor,
    ) -> None:
        fresh = await self.store.get(order_id)
        logger.info(
            "Transition lost a concurrent write",
            expected_status=current.value,
            actual_status=fresh.status.value,
        )
        if self._is_foreign_claim(fresh, requested, actor):
            raise AlreadyClaimed(
                f"Order {order_id} was already claimed by another driver",
                order_id=order_id,
            )
        raise InvalidTransition(
            f"Order {order_id} changed to {fresh.status.value} before {requested.value} could be applied",
            order_id=order_id,
            from_status=fresh.status.value,
            to_status=requested.value,
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    async def confirm_payment(self, order_id: str) -> PaymentResult:
        """Mark the order paid. Repeated calls succeed without a second event."""
        with order_context(order_id):
            return await self._confirm_payment(order_id)

    async def _confirm_payment(self, order_id: str) -> PaymentResult:
        order = await self.store.get(order_id)
        if order.is_paid:
            return PaymentResult(order_id=order_id, already_confirmed=True, order=order)

        try:
            updated = await self.store.update(
                order_id,
                {"payment_status": PaymentStatus.PAID, "paid_at": datetime.now(UTC)},
                expected={"payment_status": PaymentStatus.UNPAID},
            )
        except StaleRecord:
            # A concurrent confirmation won; its write owns the event
            return PaymentResult(order_id=order_id, already_confirmed=True, order=await self.store.get(order_id))

        logger.info("Payment confirmed", total=updated.total)

        auto_advanced = False
        if self.settings.auto_prepare_on_payment and updated.status == OrderStatus.CREATED:
            try:
                result = await self.request_transition(order_id, OrderStatus.PREPARING, Actor.system())
                updated, auto_advanced = result.order, True
            except (InvalidTransition, AlreadyClaimed) as exc:
                logger.info("Skipped advancing paid order", reason=exc.message)
        elif updated.status == OrderStatus.CANCELLED:
            logger.warning("Payment confirmed for a cancelled order")

        return PaymentResult(
            order_id=order_id,
            already_confirmed=False,
            auto_advanced=auto_advanced,
            order=updated,
        )

    # -------------------------------------------------------------------
    # Driver reassignment
    # -------------------------------------------------------------------
    async def reassign_driver(self, order_id: str, new_driver_id: str, actor: Actor) -> Order:
        """Move a claimed order to another driver (admin only)."""
        if actor.role != ActorRole.ADMIN:
            raise Unauthorized("Only an admin may reassign drivers", order_id=order_id)

        with order_context(order_id, actor_id=actor.actor_id, actor_role=actor.role.value):
            return await self._reassign_driver(order_id, new_driver_id)

    async def _reassign_driver(self, order_id: str, new_driver_id: str) -> Order:
        order = await self.store.get(order_id)
        if order.status not in (OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY) or not order.assigned_driver_id:
            raise InvalidTransition(
                f"Order {order_id} has no active driver claim to reassign",
                order_id=order_id,
                from_status=order.status.value,
            )
        if order.assigned_driver_id == new_driver_id:
            raise InvalidTransition(
                f"Driver {new_driver_id} is already assigned to order {order_id}",
                order_id=order_id,
            )

        previous = order.assigned_driver_id
        try:
            updated = await self.store.update(
                order_id,
                {"assigned_driver_id": new_driver_id, "driver_coords": None},
                expected={"assigned_driver_id": previous, "status": order.status},
            )
        except StaleRecord:
            raise InvalidTransition(
                f"Order {order_id} changed before the driver could be reassigned",
                order_id=order_id,
            ) from None

        logger.info("Driver reassigned", previous_driver_id=previous, new_driver_id=new_driver_id)
        return updated
