"""Application tests for OrderStateMachine.request_transition."""

import asyncio

import pytest
from ordering.order.order import Actor, ActorRole, OrderStatus
from ordering.order.state_machine import OrderStateMachine
from shared.events.ordering import OrderStatusChanged
from shared.exceptions import (
    AlreadyClaimed,
    InvalidTransition,
    OrderNotFound,
    StoreUnavailable,
    Unauthorized,
)

STORE = Actor(actor_id="store-1", role=ActorRole.STORE)
OWNER = Actor(actor_id="owner-1", role=ActorRole.STORE)
OTHER_STORE = Actor(actor_id="store-9", role=ActorRole.STORE)
BUYER = Actor(actor_id="buyer-1", role=ActorRole.BUYER)
ADMIN = Actor(actor_id="admin-1", role=ActorRole.ADMIN)
DRIVER_A = Actor(actor_id="driver-a", role=ActorRole.DRIVER)
DRIVER_B = Actor(actor_id="driver-b", role=ActorRole.DRIVER)


@pytest.fixture()
def machine(store):
    return OrderStateMachine(store=store)


def _status_events(relay):
    return [e for e in relay.published if isinstance(e, OrderStatusChanged)]


class TestHappyPath:
    async def test_store_starts_preparing(self, machine, make_order):
        order = await make_order()
        result = await machine.request_transition(order.id, OrderStatus.PREPARING, STORE)

        assert result.from_status == OrderStatus.CREATED
        assert result.to_status == OrderStatus.PREPARING
        assert result.order.status == OrderStatus.PREPARING

    async def test_store_owner_may_act_for_store(self, machine, make_order):
        order = await make_order()
        result = await machine.request_transition(order.id, OrderStatus.PREPARING, OWNER)
        assert result.to_status == OrderStatus.PREPARING

    async def test_accepts_status_value_string(self, machine, make_order):
        order = await make_order()
        result = await machine.request_transition(order.id, "Preparing", STORE)
        assert result.to_status == OrderStatus.PREPARING

    async def test_driver_claim_sets_assigned_driver(self, machine, store, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A)

        stored = await store.get(order.id)
        assert stored.status == OrderStatus.OUT_FOR_DELIVERY
        assert stored.assigned_driver_id == "driver-a"

    async def test_assigned_driver_delivers(self, machine, make_order):
        order = await make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver_id="driver-a")
        result = await machine.request_transition(order.id, OrderStatus.DELIVERED, DRIVER_A)
        assert result.order.status == OrderStatus.DELIVERED

    async def test_full_chain_bumps_version(self, machine, store, make_order):
        order = await make_order()
        await machine.request_transition(order.id, OrderStatus.PREPARING, STORE)
        await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A)
        await machine.request_transition(order.id, OrderStatus.DELIVERED, DRIVER_A)

        stored = await store.get(order.id)
        assert stored.status == OrderStatus.DELIVERED
        assert stored.version == order.version + 3


class TestEvents:
    async def test_one_event_per_accepted_transition(self, machine, relay, make_order):
        order = await make_order()
        await machine.request_transition(order.id, OrderStatus.PREPARING, STORE)
        await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A)

        events = _status_events(relay)
        assert [(e.from_status, e.to_status) for e in events] == [
            ("Created", "Preparing"),
            ("Preparing", "OutForDelivery"),
        ]

    async def test_event_carries_routing_ids(self, machine, relay, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A)

        event = _status_events(relay)[0]
        assert event.order_id == order.id
        assert event.buyer_id == "buyer-1"
        assert event.store_owner_id == "owner-1"
        assert event.assigned_driver_id == "driver-a"
        assert event.actor_role == "driver"

    async def test_rejected_transition_publishes_nothing(self, machine, relay, make_order):
        order = await make_order()
        with pytest.raises(InvalidTransition):
            await machine.request_transition(order.id, OrderStatus.DELIVERED, DRIVER_A)
        assert _status_events(relay) == []

    async def test_failed_write_publishes_nothing(self, machine, store, relay, make_order):
        order = await make_order()
        store.configure(should_succeed=False)
        with pytest.raises(StoreUnavailable):
            await machine.request_transition(order.id, OrderStatus.PREPARING, STORE)
        assert _status_events(relay) == []

    async def test_handler_failure_does_not_reach_requester(self, machine, wired, store, make_order, monkeypatch):
        from notifications.notification.ordering_events import OrderingEventsHandler

        def exploding(self, event, deliveries, context):
            raise RuntimeError("push service down")

        monkeypatch.setattr(OrderingEventsHandler, "_schedule", exploding)
        order = await make_order()

        result = await machine.request_transition(order.id, OrderStatus.PREPARING, STORE)

        assert result.to_status == OrderStatus.PREPARING
        assert (await store.get(order.id)).status == OrderStatus.PREPARING
        assert len(_status_events(wired)) == 1

    async def test_event_is_emitted_by_the_write_itself(self, machine, store, relay, make_order):
        order = await make_order()
        store.configure(response_latency=0.2)

        task = asyncio.create_task(machine.request_transition(order.id, OrderStatus.PREPARING, STORE))
        while not store.updates_touching(order.id, "status"):
            await asyncio.sleep(0.001)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert (await store.get(order.id)).status == OrderStatus.PREPARING
        [event] = _status_events(relay)
        assert (event.from_status, event.to_status) == ("Created", "Preparing")
        assert event.actor_id == "store-1"

    async def test_cancelled_requester_still_notifies_the_buyer(self, machine, store, wired, directory, push, make_order):
        from notifications.notification.ordering_events import drain_deliveries

        directory.register("buyer-1", push_token="tok-buyer")
        order = await make_order()
        store.configure(response_latency=0.2)

        task = asyncio.create_task(machine.request_transition(order.id, OrderStatus.PREPARING, STORE))
        while not store.updates_touching(order.id, "status"):
            await asyncio.sleep(0.001)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await drain_deliveries()

        assert [p["title"] for p in push.pushes_to("tok-buyer")] == ["Pedido en preparación"]


class TestInvalidTransitions:
    async def test_skipping_a_step(self, machine, store, make_order):
        order = await make_order()
        with pytest.raises(InvalidTransition):
            await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A)
        assert (await store.get(order.id)).status == OrderStatus.CREATED

    async def test_nothing_after_delivered(self, machine, make_order):
        order = await make_order(status=OrderStatus.DELIVERED, driver_id="driver-a")
        for status in OrderStatus:
            with pytest.raises(InvalidTransition):
                await machine.request_transition(order.id, status, ADMIN)

    async def test_cannot_cancel_out_for_delivery(self, machine, make_order):
        order = await make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver_id="driver-a")
        with pytest.raises(InvalidTransition):
            await machine.cancel(order.id, ADMIN, reason="too late")

    async def test_unknown_status_is_an_invalid_transition(self, machine, store, make_order):
        order = await make_order()
        with pytest.raises(InvalidTransition) as exc:
            await machine.request_transition(order.id, "Shipped", STORE)
        assert exc.value.context["to_status"] == "Shipped"
        assert (await store.get(order.id)).status == OrderStatus.CREATED

    async def test_missing_order(self, machine):
        with pytest.raises(OrderNotFound):
            await machine.request_transition("missing", OrderStatus.PREPARING, STORE)


class TestAuthorization:
    async def test_buyer_cannot_start_preparing(self, machine, make_order):
        order = await make_order()
        with pytest.raises(Unauthorized):
            await machine.request_transition(order.id, OrderStatus.PREPARING, BUYER)

    async def test_other_store_cannot_start_preparing(self, machine, store, make_order):
        order = await make_order()
        with pytest.raises(Unauthorized):
            await machine.request_transition(order.id, OrderStatus.PREPARING, OTHER_STORE)
        assert (await store.get(order.id)).status == OrderStatus.CREATED

    async def test_store_cannot_claim(self, machine, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        with pytest.raises(Unauthorized):
            await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, STORE)

    async def test_other_driver_cannot_deliver(self, machine, store, make_order):
        order = await make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver_id="driver-a")
        with pytest.raises(Unauthorized):
            await machine.request_transition(order.id, OrderStatus.DELIVERED, DRIVER_B)
        assert (await store.get(order.id)).status == OrderStatus.OUT_FOR_DELIVERY

    async def test_other_buyer_cannot_cancel(self, machine, make_order):
        order = await make_order()
        intruder = Actor(actor_id="buyer-2", role=ActorRole.BUYER)
        with pytest.raises(Unauthorized):
            await machine.cancel(order.id, intruder)


class TestClaims:
    async def test_second_driver_gets_already_claimed(self, machine, store, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A)

        with pytest.raises(AlreadyClaimed):
            await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_B)
        assert (await store.get(order.id)).assigned_driver_id == "driver-a"

    async def test_claim_blocked_when_another_driver_holds_order(self, machine, store, make_order):
        order = await make_order(status=OrderStatus.PREPARING, driver_id="driver-a")
        with pytest.raises(AlreadyClaimed):
            await machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_B)
        stored = await store.get(order.id)
        assert stored.status == OrderStatus.PREPARING
        assert stored.assigned_driver_id == "driver-a"

    async def test_concurrent_claims_have_exactly_one_winner(self, machine, store, relay, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        store.configure(latency=0.01)

        results = await asyncio.gather(
            machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A),
            machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_B),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], AlreadyClaimed)

        stored = await store.get(order.id)
        assert stored.assigned_driver_id == winners[0].order.assigned_driver_id
        assert len(_status_events(relay)) == 1

    async def test_concurrent_store_and_driver_race(self, machine, store, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        store.configure(latency=0.01)

        results = await asyncio.gather(
            machine.cancel(order.id, STORE, reason="out of stock"),
            machine.request_transition(order.id, OrderStatus.OUT_FOR_DELIVERY, DRIVER_A),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, Exception)) == 1
        assert any(isinstance(r, InvalidTransition) for r in results)


class TestCancellation:
    async def test_buyer_cancels_created_order(self, machine, store, make_order):
        order = await make_order()
        result = await machine.cancel(order.id, BUYER, reason="changed my mind")

        assert result.to_status == OrderStatus.CANCELLED
        stored = await store.get(order.id)
        assert stored.cancellation_reason == "changed my mind"

    async def test_store_cancels_while_preparing(self, machine, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        result = await machine.cancel(order.id, STORE, reason="out of stock")
        assert result.to_status == OrderStatus.CANCELLED

    async def test_buyer_cannot_cancel_while_preparing(self, machine, make_order):
        order = await make_order(status=OrderStatus.PREPARING)
        with pytest.raises(Unauthorized):
            await machine.cancel(order.id, BUYER)

    async def test_reason_reaches_event(self, machine, relay, make_order):
        order = await make_order()
        await machine.cancel(order.id, ADMIN, reason="fraud")
        assert _status_events(relay)[0].reason == "fraud"
