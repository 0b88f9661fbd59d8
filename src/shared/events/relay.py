"""In-process relay of shared events into subscribed Protean domains.

The emitting domain hands an event over from inside the write it describes.
For every subscribed domain the relay pushes that domain's context and runs
Protean's synchronous dispatch, so the domain's own ``@event_handler``
classes receive the event exactly as they would from a broker.

A handler failure is logged and never propagates back to the writer, so a
failed push can never be mistaken for a failed state transition.
"""

from collections import deque

import structlog
from protean.domain import Domain
from protean.utils.sync_dispatch import dispatch_events_sync

from shared.config import get_settings

logger = structlog.get_logger(__name__)

_relay_instance = None


class EventRelay:
    def __init__(self, history_size: int | None = None):
        self._domains: list[Domain] = []
        self.published: deque = deque(maxlen=history_size or get_settings().event_history_size)

    def subscribe(self, domain: Domain) -> None:
        """Route every published event to ``domain``'s event handlers."""
        if domain not in self._domains:
            self._domains.append(domain)

    @property
    def subscribers(self) -> list[str]:
        return [domain.name for domain in self._domains]

    def publish(self, event) -> None:
        self.published.append(event)
        for domain in list(self._domains):
            try:
                with domain.domain_context():
                    dispatch_events_sync([event], domain.handlers_for)
            except Exception:
                logger.exception(
                    "Event handler failed",
                    event_type=event.__class__.__type__,
                    order_id=getattr(event, "order_id", None),
                    domain=domain.name,
                )


def get_relay() -> EventRelay:
    """Return the process-wide relay (singleton)."""
    global _relay_instance
    if _relay_instance is None:
        _relay_instance = EventRelay()
    return _relay_instance


def reset_relay() -> None:
    """Reset the relay singleton (useful for testing)."""
    global _relay_instance
    _relay_instance = None
