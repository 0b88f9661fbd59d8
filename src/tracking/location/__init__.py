"""Geolocation sensor abstraction — pluggable device position source."""

import os

_sensor_instance = None


def get_sensor():
    """Return the configured geolocation sensor (singleton).

    Uses FakeGeolocationSensor by default. On a device build, configure via
    GEOLOCATION_ADAPTER environment variable.
    """
    global _sensor_instance
    if _sensor_instance is None:
        adapter = os.environ.get("GEOLOCATION_ADAPTER", "fake")
        if adapter == "fake":
            from tracking.location.fake_sensor import FakeGeolocationSensor

            _sensor_instance = FakeGeolocationSensor()
        else:
            raise ValueError(f"Unknown geolocation adapter: {adapter}")
    return _sensor_instance


def reset_sensor():
    """Reset the sensor singleton (useful for testing)."""
    global _sensor_instance
    _sensor_instance = None
