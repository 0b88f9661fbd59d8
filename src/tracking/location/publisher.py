"""LocationPublisher — streams the assigned driver's position onto the order.

State Machine:
    INACTIVE ⇄ ACTIVE

The publisher is ACTIVE exactly while all three inputs hold:

    is_assigned_driver and status == OutForDelivery and location_available

``reconcile`` re-evaluates that predicate and is idempotent: calling it again
with the same inputs does nothing. The publisher subscribes to the order
record and reconciles on every change, so it stops by itself when the order
is delivered, cancelled or handed to another driver.

Each sensor sample becomes a fire-and-forget coordinate write stamped with
the time it is written; the device timestamp is kept as ``sampled_at``. Writes are
tagged with the activation they belong to; once the publisher deactivates,
samples and queued writes from the old activation are dropped. The store
write is also conditional on the order still being OutForDelivery with this
driver assigned, so no coordinate can land after the order moves on.

Sensor problems never raise. They are reported once through ``on_warning``
and kept in ``warnings`` for the host UI to show.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

import structlog

from ordering.order.order import DriverCoords, Order, OrderStatus
from ordering.store import get_order_store
from shared.config import get_settings
from shared.exceptions import (
    DomainError,
    OrderNotFound,
    SensorError,
    SensorUnavailable,
    StaleRecord,
    StoreUnavailable,
)
from shared.logging import order_context
from tracking.location import get_sensor
from tracking.location.sensor_port import PositionSample, WatchOptions

logger = structlog.get_logger(__name__)


class PublisherState(Enum):
    INACTIVE = "Inactive"
    ACTIVE = "Active"


def should_publish(is_assigned_driver: bool, status: OrderStatus, location_available: bool) -> bool:
    return is_assigned_driver and status == OrderStatus.OUT_FOR_DELIVERY and location_available


class LocationPublisher:
    def __init__(
        self,
        order_id: str,
        driver_id: str,
        store=None,
        sensor=None,
        settings=None,
        on_warning: Callable[[DomainError], None] | None = None,
    ):
        self.order_id = order_id
        self.driver_id = driver_id
        self.store = store or get_order_store()
        self.sensor = sensor or get_sensor()
        self.settings = settings or get_settings()
        self.on_warning = on_warning

        self.state = PublisherState.INACTIVE
        self.warnings: list[DomainError] = []

        self._generation = 0
        self._cancel_watch = None
        self._inputs: tuple | None = None
        self._halted_inputs: tuple | None = None
        self._unavailable_warned = False
        self._timeout_warned_generation: int | None = None
        self._unsubscribe = None
        self._writes: set[asyncio.Task] = set()

    @property
    def is_active(self) -> bool:
        return self.state == PublisherState.ACTIVE

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    async def start(self) -> PublisherState:
        """Read the order, follow its changes and reconcile once."""
        order = await self.store.get(self.order_id)
        self._unsubscribe = self.store.subscribe(self.order_id, self._on_order_changed)
        self._on_order_changed(order)
        return self.state

    def close(self) -> None:
        """Host view torn down: stop following the order and stop publishing."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.is_active:
            self._deactivate("closed")

    async def drain(self) -> None:
        """Wait for coordinate writes already in flight."""
        if self._writes:
            await asyncio.gather(*list(self._writes), return_exceptions=True)

    def _on_order_changed(self, order: Order) -> None:
        self.reconcile(
            order.is_assigned_driver(self.driver_id),
            order.status,
            self.sensor.is_available(),
        )

    # -------------------------------------------------------------------
    # Activation predicate
    # -------------------------------------------------------------------
    def reconcile(self, is_assigned_driver: bool, status: OrderStatus, location_available: bool) -> PublisherState:
        inputs = (is_assigned_driver, status, location_available)
        self._inputs = inputs
        wanted = should_publish(*inputs)

        if self._halted_inputs is not None:
            if inputs == self._halted_inputs:
                wanted = False
            else:
                self._halted_inputs = None

        if location_available:
            self._unavailable_warned = False
        elif is_assigned_driver and status == OrderStatus.OUT_FOR_DELIVERY and not self._unavailable_warned:
            self._unavailable_warned = True
            self._warn(SensorUnavailable("Location is not available on this device", order_id=self.order_id))

        if wanted and not self.is_active:
            self._activate()
        elif not wanted and self.is_active:
            self._deactivate("predicate no longer holds")
        return self.state

    def _activate(self) -> None:
        self._generation += 1
        generation = self._generation
        self.state = PublisherState.ACTIVE
        try:
            self._cancel_watch = self.sensor.subscribe(
                WatchOptions.from_settings(self.settings),
                lambda sample: self._on_sample(generation, sample),
                lambda error: self._on_sensor_error(generation, error),
            )
        except SensorUnavailable as exc:
            self.state = PublisherState.INACTIVE
            self._cancel_watch = None
            self._halted_inputs = self._inputs
            if not self._unavailable_warned:
                self._unavailable_warned = True
                self._warn(exc)
            return
        logger.info("Location publishing started", order_id=self.order_id, driver_id=self.driver_id)

    def _deactivate(self, reason: str) -> None:
        self.state = PublisherState.INACTIVE
        # Invalidate every callback and queued write of the old activation
        self._generation += 1
        cancel, self._cancel_watch = self._cancel_watch, None
        if cancel is not None:
            cancel()
        logger.info("Location publishing stopped", order_id=self.order_id, driver_id=self.driver_id, reason=reason)

    # -------------------------------------------------------------------
    # Sensor callbacks
    # -------------------------------------------------------------------
    def _on_sample(self, generation: int, sample: PositionSample) -> None:
        if generation != self._generation or not self.is_active:
            logger.debug("Dropped sample from a stale watch", order_id=self.order_id)
            return
        task = asyncio.get_running_loop().create_task(self._write(generation, sample))
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)

    def _on_sensor_error(self, generation: int, error: SensorError) -> None:
        if generation != self._generation:
            return
        if error.is_transient:
            if self._timeout_warned_generation != generation:
                self._timeout_warned_generation = generation
                self._warn(error)
            return
        self._warn(error)
        self._deactivate(f"sensor error: {error.reason}")
        self._halted_inputs = self._inputs

    async def _write(self, generation: int, sample: PositionSample) -> None:
        if generation != self._generation:
            return
        coords = DriverCoords(
            latitude=sample.latitude,
            longitude=sample.longitude,
            last_update=datetime.now(UTC),
            sampled_at=sample.timestamp,
        )
        with order_context(self.order_id, driver_id=self.driver_id):
            try:
                await self.store.update(
                    self.order_id,
                    {"driver_coords": coords},
                    expected={"status": OrderStatus.OUT_FOR_DELIVERY, "assigned_driver_id": self.driver_id},
                )
            except StaleRecord:
                logger.info("Coordinate write rejected, order moved on")
            except (StoreUnavailable, OrderNotFound) as exc:
                logger.warning("Coordinate write failed", error=exc.message)

    def _warn(self, error: DomainError) -> None:
        self.warnings.append(error)
        logger.warning(
            "Location warning",
            order_id=self.order_id,
            driver_id=self.driver_id,
            code=error.code,
            message=error.message,
        )
        if self.on_warning is not None:
            self.on_warning(error)
