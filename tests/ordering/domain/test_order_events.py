"""Tests for deriving Ordering events from a write's before/after records."""

from datetime import UTC, datetime

import pytest
from ordering.domain import ordering
from ordering.order.events import events_for_write
from ordering.order.order import (
    Actor,
    ActorRole,
    Order,
    OrderStatus,
    PaymentStatus,
    ShippingAddress,
)
from shared.events.ordering import DriverReassigned, OrderPlaced, OrderStatusChanged, PaymentConfirmed

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def ordering_context():
    with ordering.domain_context():
        yield


def _order(**overrides):
    fields = {
        "id": "ord-001",
        "store_id": "store-1",
        "store_owner_id": "owner-1",
        "buyer_id": "buyer-1",
        "total": 15.0,
        "shipping_address": ShippingAddress(name="Ana", address="Calle 1"),
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Order(**fields)


class TestCreate:
    def test_create_is_order_placed(self):
        [event] = events_for_write(None, _order())

        assert isinstance(event, OrderPlaced)
        assert event.order_id == "ord-001"
        assert event.buyer_name == "Ana"
        assert event.placed_at == NOW


class TestStatusChange:
    def test_status_change_names_actor_and_reason(self):
        before = _order()
        after = _order(
            status=OrderStatus.CANCELLED,
            status_changed_by=Actor(actor_id="buyer-1", role=ActorRole.BUYER),
            status_reason="Me arrepentí",
        )

        [event] = events_for_write(before, after)

        assert isinstance(event, OrderStatusChanged)
        assert (event.from_status, event.to_status) == ("Created", "Cancelled")
        assert (event.actor_id, event.actor_role) == ("buyer-1", "buyer")
        assert event.reason == "Me arrepentí"

    def test_reason_is_kept_verbatim(self):
        after = _order(status=OrderStatus.CANCELLED, status_reason="Sin stock & cerrado")
        [event] = events_for_write(_order(), after)
        assert event.reason == "Sin stock & cerrado"

    def test_unknown_actor_defaults_to_system(self):
        [event] = events_for_write(_order(), _order(status=OrderStatus.PREPARING))
        assert (event.actor_id, event.actor_role) == ("system", "system")


class TestPayment:
    def test_payment_is_confirmed_once(self):
        after = _order(payment_status=PaymentStatus.PAID, paid_at=NOW)

        [event] = events_for_write(_order(), after)

        assert isinstance(event, PaymentConfirmed)
        assert event.confirmed_at == NOW

    def test_already_paid_is_not_repeated(self):
        paid = _order(payment_status=PaymentStatus.PAID, paid_at=NOW)
        assert events_for_write(paid, paid.model_copy()) == []


class TestDriverChange:
    def test_claim_move_is_a_reassignment(self):
        before = _order(status=OrderStatus.OUT_FOR_DELIVERY, assigned_driver_id="driver-a")
        after = _order(status=OrderStatus.OUT_FOR_DELIVERY, assigned_driver_id="driver-b")

        [event] = events_for_write(before, after)

        assert isinstance(event, DriverReassigned)
        assert (event.previous_driver_id, event.new_driver_id) == ("driver-a", "driver-b")

    def test_first_claim_is_only_a_status_change(self):
        before = _order(status=OrderStatus.PREPARING)
        after = _order(status=OrderStatus.OUT_FOR_DELIVERY, assigned_driver_id="driver-a")

        events = events_for_write(before, after)

        assert [type(e) for e in events] == [OrderStatusChanged]


class TestQuietWrites:
    def test_coordinates_write_owes_nothing(self):
        before = _order(status=OrderStatus.OUT_FOR_DELIVERY, assigned_driver_id="driver-a")
        assert events_for_write(before, before.model_copy(update={"updated_at": NOW})) == []
