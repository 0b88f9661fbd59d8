"""Chat session store adapter."""

import os

_store_instance = None


def get_chat_store():
    """Return the configured chat session store (singleton).

    Uses the in-memory store by default. In production, configure via
    CHAT_STORE_ADAPTER environment variable.
    """
    global _store_instance
    if _store_instance is None:
        adapter = os.environ.get("CHAT_STORE_ADAPTER", "memory")
        if adapter == "memory":
            from chat.store.memory import InMemoryChatSessionStore

            _store_instance = InMemoryChatSessionStore()
        else:
            raise ValueError(f"Unknown chat store adapter: {adapter}")
    return _store_instance


def reset_chat_store():
    """Reset the store singleton (useful for testing)."""
    global _store_instance
    _store_instance = None
