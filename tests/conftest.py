import os
from pathlib import Path
from uuid import uuid4

import pytest

os.environ.setdefault("ENCOMIENDA_ENV", "test")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


def _reset_singletons():
    from chat.store import reset_chat_store
    from notifications.channel import reset_channels
    from notifications.inbox import reset_inbox
    from notifications.notification.ordering_events import reset_deliveries
    from notifications.recipient import reset_directory
    from ordering.store import reset_order_store
    from reviews.store import reset_review_store
    from shared.config import reset_settings
    from shared.events.relay import reset_relay
    from tracking.location import reset_sensor

    reset_settings()
    reset_relay()
    reset_deliveries()
    reset_order_store()
    reset_sensor()
    reset_channels()
    reset_directory()
    reset_inbox()
    reset_chat_store()
    reset_review_store()


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering
    from ordering.order import events  # noqa: F401
    from protean.integrations.pytest import DomainFixture

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def notifications_bed():
    from notifications.domain import notifications
    from notifications.notification import ordering_events  # noqa: F401
    from protean.integrations.pytest import DomainFixture

    bed = DomainFixture(notifications)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed, notifications_bed):
    """Run every test inside the Notifications domain context; its stores are reset afterwards."""
    with notifications_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(tmp_path, monkeypatch):
    """Give every test fresh adapters and a private log directory."""
    monkeypatch.setenv("ENCOMIENDA_ENV", "test")
    monkeypatch.setenv("ENCOMIENDA_LOG_DIR", str(tmp_path / "logs"))
    _reset_singletons()
    yield
    _reset_singletons()


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def store():
    from ordering.store import get_order_store

    return get_order_store()


@pytest.fixture()
def relay():
    from shared.events.relay import get_relay

    return get_relay()


@pytest.fixture()
def wired(relay):
    """Relay with the Notifications domain subscribed, as the app wires it."""
    from notifications.domain import notifications

    relay.subscribe(notifications)
    return relay


@pytest.fixture()
def sensor():
    from tracking.location import get_sensor

    return get_sensor()


@pytest.fixture()
def push():
    from notifications.channel import get_push_channel

    return get_push_channel()


@pytest.fixture()
def directory():
    from notifications.recipient import get_directory

    return get_directory()


@pytest.fixture()
def inbox():
    from notifications.inbox import get_inbox

    return get_inbox()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
BUYER = "buyer-1"
STORE = "store-1"
STORE_OWNER = "owner-1"
DRIVER_A = "driver-a"
DRIVER_B = "driver-b"


@pytest.fixture()
def make_order(store):
    """Async factory storing an order directly in the given state, without announcing it."""
    from ordering.order.order import Order, OrderItem, OrderStatus, ShippingAddress

    async def _make(status=OrderStatus.CREATED, driver_id=None, **overrides):
        fields = {
            "id": f"ord-{uuid4().hex[:10]}",
            "status": status,
            "store_id": STORE,
            "store_owner_id": STORE_OWNER,
            "buyer_id": BUYER,
            "assigned_driver_id": driver_id,
            "items": [OrderItem(product_id="prod-1", name="Empanadas", unit_price=2.5, quantity=4)],
            "subtotal": 10.0,
            "delivery_fee": 5.0,
            "total": 15.0,
            "shipping_address": ShippingAddress(name="Ana", address="Calle Falsa 123"),
        }
        fields.update(overrides)
        return await store.seed(Order(**fields))

    return _make
