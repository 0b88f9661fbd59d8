"""Review store adapter."""

import os

_store_instance = None


def get_review_store():
    """Return the configured review store (singleton).

    Uses the in-memory store by default. In production, configure via
    REVIEW_STORE_ADAPTER environment variable.
    """
    global _store_instance
    if _store_instance is None:
        adapter = os.environ.get("REVIEW_STORE_ADAPTER", "memory")
        if adapter == "memory":
            from reviews.store.memory import InMemoryReviewStore

            _store_instance = InMemoryReviewStore()
        else:
            raise ValueError(f"Unknown review store adapter: {adapter}")
    return _store_instance


def reset_review_store():
    """Reset the store singleton (useful for testing)."""
    global _store_instance
    _store_instance = None
