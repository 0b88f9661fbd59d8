"""Order record store port — abstract interface for the shared order document.

The document store is an external collaborator. Every interaction is one
arms-length call with its own error channel; no component holds a lock on a
record across an ``await``. Cross-field invariants are enforced by the
writer passing ``expected`` values, which the store checks atomically with
the write (compare-and-swap).
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from ordering.order.order import Order

Unsubscribe = Callable[[], None]
WriteListener = Callable[[Order | None, Order], None]


class OrderRecordStore(ABC):
    """Abstract interface for order record store adapters."""

    @abstractmethod
    async def get(self, order_id: str) -> Order:
        """Return the current record.

        Raises:
            OrderNotFound: no record with that id.
        """
        ...

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """Store a brand new record. Raises ``StaleRecord`` if the id is taken."""
        ...

    @abstractmethod
    async def update(self, order_id: str, fields: dict, expected: dict | None = None) -> Order:
        """Apply a partial update touching only the named fields.

        Args:
            fields: field name → new value. Other fields are left untouched.
            expected: field name → value the record must hold for the write
                to apply. Checked atomically with the write.

        Returns:
            The record after the write.

        Raises:
            OrderNotFound: no record with that id.
            StaleRecord: an ``expected`` value did not match.
            StoreUnavailable: the write could not be performed.
        """
        ...

    @abstractmethod
    def subscribe(self, order_id: str, on_change: Callable[[Order], None]) -> Unsubscribe:
        """Call ``on_change`` with the new record after every write to it.

        Returns a callable that cancels the subscription.
        """
        ...

    @abstractmethod
    def on_write(self, listener: WriteListener) -> Unsubscribe:
        """Call ``listener(before, after)`` as part of every accepted write.

        ``before`` is None for a create. Runs before the write is acknowledged
        to its caller, so a caller that stops waiting cannot lose it.
        """
        ...
