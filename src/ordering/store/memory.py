"""In-memory order record store — document-store stand-in for tests and development.

Records are kept as serialized documents, never as shared model instances:
every read returns a fresh ``Order``. Writes are serialized by the store
itself, mirroring the per-document atomicity of the real document store.
Write listeners run inside the write, under the store's lock, so whatever
they announce is tied to the write itself and not to whoever awaited it.
Configurable latency and failure injection exercise the callers' async and
error paths.
"""

import asyncio
from collections import defaultdict
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

import structlog
from pydantic import BaseModel

from ordering.order.order import Order
from ordering.store.port import OrderRecordStore, Unsubscribe, WriteListener
from shared.exceptions import OrderNotFound, StaleRecord, StoreUnavailable

logger = structlog.get_logger(__name__)

# Fields owned by the store itself
_PROTECTED_FIELDS = {"id", "version"}


def _encode(value):
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class InMemoryOrderRecordStore(OrderRecordStore):
    def __init__(self):
        self._documents: dict[str, dict] = {}
        self._subscribers: dict[str, list[Callable[[Order], None]]] = defaultdict(list)
        self._write_listeners: list[WriteListener] = []
        self._lock: asyncio.Lock | None = None
        self.applied_updates: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Order store unavailable"
        self.latency = 0.0
        self.response_latency = 0.0

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Order store unavailable",
        latency: float = 0.0,
        response_latency: float = 0.0,
    ):
        """Configure the fake store behavior for testing.

        ``latency`` delays a write before it is applied; ``response_latency``
        delays the acknowledgement after it is applied.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.latency = latency
        self.response_latency = response_latency

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def get(self, order_id: str) -> Order:
        document = self._documents.get(order_id)
        if document is None:
            raise OrderNotFound(f"Order {order_id} not found", order_id=order_id)
        return Order.model_validate(document)

    async def create(self, order: Order) -> Order:
        async with self._get_lock():
            if order.id in self._documents:
                raise StaleRecord(f"Order {order.id} already exists", order_id=order.id)
            document = order.model_copy(update={"version": 1}).model_dump(mode="json")
            self._documents[order.id] = document
            created = Order.model_validate(document)
            self._announce(None, created)
        self._notify(order.id, created)
        return created

    async def seed(self, order: Order) -> Order:
        """Store a record as given, without announcing it. Test and fixture setup only."""
        document = order.model_copy(update={"version": max(order.version, 1)}).model_dump(mode="json")
        self._documents[order.id] = document
        return Order.model_validate(document)

    async def update(self, order_id: str, fields: dict, expected: dict | None = None) -> Order:
        unknown = set(fields) - set(Order.model_fields)
        if unknown or _PROTECTED_FIELDS & set(fields):
            raise ValueError(f"Cannot update fields: {sorted(unknown | (_PROTECTED_FIELDS & set(fields)))}")

        if self.latency:
            await asyncio.sleep(self.latency)

        async with self._get_lock():
            if not self.should_succeed:
                raise StoreUnavailable(self.failure_reason, order_id=order_id)

            current = self._documents.get(order_id)
            if current is None:
                raise OrderNotFound(f"Order {order_id} not found", order_id=order_id)

            for name, value in (expected or {}).items():
                if current.get(name) != _encode(value):
                    raise StaleRecord(
                        f"Order {order_id} changed: {name} is {current.get(name)!r}",
                        order_id=order_id,
                        field=name,
                    )

            candidate = {**current, **{name: _encode(value) for name, value in fields.items()}}
            candidate["version"] = current["version"] + 1
            candidate["updated_at"] = datetime.now(UTC).isoformat()
            updated = Order.model_validate(candidate)
            self._documents[order_id] = updated.model_dump(mode="json")
            self.applied_updates.append({"order_id": order_id, "fields": dict(fields)})
            self._announce(Order.model_validate(current), updated)

        self._notify(order_id, updated)
        if self.response_latency:
            await asyncio.sleep(self.response_latency)
        return updated

    def subscribe(self, order_id: str, on_change: Callable[[Order], None]) -> Unsubscribe:
        self._subscribers[order_id].append(on_change)

        def unsubscribe() -> None:
            if on_change in self._subscribers.get(order_id, []):
                self._subscribers[order_id].remove(on_change)

        return unsubscribe

    def on_write(self, listener: WriteListener) -> Unsubscribe:
        self._write_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._write_listeners:
                self._write_listeners.remove(listener)

        return unsubscribe

    def _announce(self, before: Order | None, after: Order) -> None:
        for listener in list(self._write_listeners):
            try:
                listener(before, after.model_copy(deep=True))
            except Exception:
                logger.exception("Order write listener failed", order_id=after.id)

    def _notify(self, order_id: str, order: Order) -> None:
        for callback in list(self._subscribers.get(order_id, [])):
            try:
                callback(order.model_copy(deep=True))
            except Exception:
                logger.exception("Order change subscriber failed", order_id=order_id)

    def updates_touching(self, order_id: str, field: str) -> list[dict]:
        """Applied updates for ``order_id`` that wrote ``field``."""
        return [u for u in self.applied_updates if u["order_id"] == order_id and field in u["fields"]]

    def reset(self):
        """Drop all records, subscriptions and recorded writes."""
        self._documents.clear()
        self._subscribers.clear()
        self.applied_updates.clear()
        self._lock = None
        self.should_succeed = True
        self.failure_reason = "Order store unavailable"
        self.latency = 0.0
        self.response_latency = 0.0
