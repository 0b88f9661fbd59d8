"""Runtime configuration for the delivery core.

Values come from ``ENCOMIENDA_*`` environment variables or a local ``.env``
file. ``ENCOMIENDA_ENV`` selects the overlay ("development", "test",
"staging", "production"), which also picks the log level and format.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ENCOMIENDA_",
        env_file=".env",
        extra="ignore",
    )

    env: str = "development"

    # Deep links in push payloads must be absolute: the background
    # notification handler has no access to the app router.
    public_base_url: str = "https://encomienda-ya-app.vercel.app"
    push_icon: str = "/icons/icon-192x192.png"
    push_badge: str = "/icons/icon-72x72.png"

    # Live position
    location_freshness_seconds: int = 120
    location_high_accuracy: bool = True
    location_max_cache_age_ms: int = 0
    location_sample_timeout_ms: int = 10_000

    # Ordering
    auto_prepare_on_payment: bool = True
    default_delivery_fee: float = 5.0

    # The event relay keeps a bounded history of published events for diagnostics
    event_history_size: int = 1000

    # Logging: level defaults by env; an empty log_dir disables log files
    log_level: str | None = None
    log_dir: str = "logs"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
