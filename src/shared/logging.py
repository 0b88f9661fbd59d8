"""Logging configuration shared by every bounded context.

Protean's ``configure_logging`` installs the handlers (console plus rotating
files) and the structlog chain. ``Settings`` is the only source for the
environment, level and log directory.

Order-scoped work binds the order id once with ``order_context`` and every
structlog event logged inside it carries it.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from protean.utils.logging import configure_logging as configure_protean_logging

from shared.config import Settings, get_settings

LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

JSON_ENVIRONMENTS = {"production", "staging"}


def log_level(settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    if settings.log_level:
        return settings.log_level.upper()
    return LEVELS.get(settings.env.lower(), "INFO")


def configure_logging(settings: Settings | None = None) -> None:
    """Configure all logging for the application.

    JSON output in production and staging, colored console elsewhere. An
    empty ``log_dir`` disables the rotating files.
    """
    settings = settings or get_settings()
    configure_protean_logging(
        level=log_level(settings),
        format="json" if settings.env.lower() in JSON_ENVIRONMENTS else "console",
        log_dir=settings.log_dir or None,
        log_file_prefix="encomienda",
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def order_context(order_id: str, **extra) -> Iterator[None]:
    """Bind ``order_id`` (and ``extra``) to every log event inside the block."""
    with structlog.contextvars.bound_contextvars(order_id=order_id, **extra):
        yield
