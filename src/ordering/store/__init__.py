"""Order record store adapter — pluggable document store integration."""

import os

_store_instance = None


def get_order_store():
    """Return the configured order record store (singleton).

    Uses the in-memory store by default. In production, configure via
    ORDER_STORE_ADAPTER environment variable. Every accepted write is
    announced through ``ordering.order.events``.
    """
    global _store_instance
    if _store_instance is None:
        adapter = os.environ.get("ORDER_STORE_ADAPTER", "memory")
        if adapter == "memory":
            from ordering.store.memory import InMemoryOrderRecordStore

            store = InMemoryOrderRecordStore()
        else:
            raise ValueError(f"Unknown order store adapter: {adapter}")

        from ordering.order.events import announce_write

        store.on_write(announce_write)
        _store_instance = store
    return _store_instance


def reset_order_store():
    """Reset the store singleton (useful for testing)."""
    global _store_instance
    _store_instance = None
