"""TrackingView — what the buyer's order page shows.

Read-only. The position is reported only while the order is out for
delivery and the last fix is younger than the freshness threshold; anything
else is "position unknown".
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import BaseModel

from ordering.order.order import FORWARD_CHAIN, DriverCoords, Order, OrderStatus
from ordering.store import get_order_store
from shared.config import get_settings


class TrackingSnapshot(BaseModel):
    order_id: str
    status: OrderStatus
    label: str
    step: int | None = None  # 1-based position in the forward chain; None when cancelled
    total_steps: int = len(FORWARD_CHAIN)
    position: DriverCoords | None = None

    @property
    def position_known(self) -> bool:
        return self.position is not None


def snapshot(order: Order, now: datetime | None = None, settings=None) -> TrackingSnapshot:
    settings = settings or get_settings()
    max_age = timedelta(seconds=settings.location_freshness_seconds)
    step = FORWARD_CHAIN.index(order.status) + 1 if order.status in FORWARD_CHAIN else None
    return TrackingSnapshot(
        order_id=order.id,
        status=order.status,
        label=order.status.label,
        step=step,
        position=order.known_position(max_age, now),
    )


class TrackingView:
    """Follows one order and hands a fresh snapshot to ``on_snapshot`` on every change."""

    def __init__(self, order_id: str, on_snapshot: Callable[[TrackingSnapshot], None], store=None, settings=None):
        self.order_id = order_id
        self.on_snapshot = on_snapshot
        self.store = store or get_order_store()
        self.settings = settings or get_settings()
        self.latest: TrackingSnapshot | None = None
        self._unsubscribe = None

    async def start(self) -> TrackingSnapshot:
        order = await self.store.get(self.order_id)
        self._unsubscribe = self.store.subscribe(self.order_id, self._on_order_changed)
        self._on_order_changed(order)
        return self.latest

    def _on_order_changed(self, order: Order) -> None:
        self.latest = snapshot(order, settings=self.settings)
        self.on_snapshot(self.latest)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
