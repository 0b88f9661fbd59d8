"""Recipient directory adapter — where users' push tokens are registered."""

import os

_directory_instance = None


def get_directory():
    """Return the configured recipient directory (singleton).

    Uses the in-memory directory by default. In production, configure via
    RECIPIENT_DIRECTORY_ADAPTER environment variable.
    """
    global _directory_instance
    if _directory_instance is None:
        adapter = os.environ.get("RECIPIENT_DIRECTORY_ADAPTER", "memory")
        if adapter == "memory":
            from notifications.recipient.memory import InMemoryRecipientDirectory

            _directory_instance = InMemoryRecipientDirectory()
        else:
            raise ValueError(f"Unknown recipient directory adapter: {adapter}")
    return _directory_instance


def reset_directory():
    """Reset the directory singleton (useful for testing)."""
    global _directory_instance
    _directory_instance = None
