"""Notification inbox adapter — the in-app bell history."""

_inbox_instance = None


def get_inbox():
    """Return the process-wide inbox (singleton)."""
    global _inbox_instance
    if _inbox_instance is None:
        from notifications.inbox.repository import NotificationInbox

        _inbox_instance = NotificationInbox()
    return _inbox_instance


def reset_inbox():
    """Reset the inbox singleton (useful for testing)."""
    global _inbox_instance
    _inbox_instance = None
