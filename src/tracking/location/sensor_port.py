"""Geolocation port — abstract interface for the device position sensor.

A watch is long-lived: the sensor keeps calling ``on_sample`` until the
returned cancel callable is invoked. ``sample_timeout_ms`` bounds the wait
for each individual sample, never the subscription as a whole.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, Field

from shared.exceptions import SensorError

CancelWatch = Callable[[], None]


class WatchOptions(BaseModel):
    high_accuracy: bool = True
    max_cache_age_ms: int = Field(default=0, ge=0)
    sample_timeout_ms: int = Field(default=10_000, gt=0)

    @classmethod
    def from_settings(cls, settings) -> "WatchOptions":
        return cls(
            high_accuracy=settings.location_high_accuracy,
            max_cache_age_ms=settings.location_max_cache_age_ms,
            sample_timeout_ms=settings.location_sample_timeout_ms,
        )


class PositionSample(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: float | None = None
    timestamp: datetime


class GeolocationPort(ABC):
    """Abstract interface for geolocation sensor adapters."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the device exposes a position sensor at all."""
        ...

    @abstractmethod
    def subscribe(
        self,
        options: WatchOptions,
        on_sample: Callable[[PositionSample], None],
        on_error: Callable[[SensorError], None],
    ) -> CancelWatch:
        """Start a watch and return the callable that cancels it.

        Cancelling is synchronous: no callback fires once it returns.

        Raises:
            SensorUnavailable: the device has no usable sensor.
        """
        ...
