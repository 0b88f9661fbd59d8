"""Fake geolocation sensor — scripted position source for testing and development.

Tests drive it by hand: ``emit`` delivers a sample to every live watch,
``fail`` delivers a sensor error. Availability is configurable so the
"no sensor" path can be exercised.
"""

from datetime import UTC, datetime
from itertools import count

from shared.exceptions import SensorError, SensorUnavailable
from tracking.location.sensor_port import GeolocationPort, PositionSample, WatchOptions


class FakeGeolocationSensor(GeolocationPort):
    """Fake sensor that is available by default and emits nothing on its own."""

    def __init__(self):
        self.available = True
        self._watches: dict[int, tuple] = {}
        self._ids = count(1)
        self.subscriptions: list[WatchOptions] = []
        self.cancellations = 0

    def configure(self, available: bool = True):
        """Configure the fake sensor behavior for testing."""
        self.available = available

    def is_available(self) -> bool:
        return self.available

    def subscribe(self, options, on_sample, on_error):
        if not self.available:
            raise SensorUnavailable("Geolocation is not supported on this device")

        watch_id = next(self._ids)
        self._watches[watch_id] = (options, on_sample, on_error)
        self.subscriptions.append(options)

        def cancel() -> None:
            if self._watches.pop(watch_id, None) is not None:
                self.cancellations += 1

        return cancel

    @property
    def active_watches(self) -> int:
        return len(self._watches)

    def emit(
        self,
        latitude: float,
        longitude: float,
        accuracy: float | None = None,
        timestamp: datetime | None = None,
    ) -> PositionSample:
        """Deliver one sample to every live watch."""
        sample = PositionSample(
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            timestamp=timestamp or datetime.now(UTC),
        )
        for _, on_sample, _ in list(self._watches.values()):
            on_sample(sample)
        return sample

    def fail(self, reason: str = SensorError.POSITION_UNAVAILABLE, message: str | None = None) -> None:
        """Deliver a sensor error to every live watch."""
        error = SensorError(message or f"Geolocation error: {reason}", reason=reason)
        for _, _, on_error in list(self._watches.values()):
            on_error(error)

    def reset(self):
        self.available = True
        self._watches.clear()
        self.subscriptions.clear()
        self.cancellations = 0
