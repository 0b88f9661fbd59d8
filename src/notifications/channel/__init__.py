"""Channel adapter registry — pluggable push dispatch channel.

Provides singleton access to the push adapter. Uses the fake adapter by
default; a real adapter (FCM) can be configured via the PUSH_ADAPTER
environment variable in production.
"""

import os

_push_instance = None


def get_push_channel():
    """Return the configured push adapter (singleton)."""
    global _push_instance
    if _push_instance is None:
        adapter = os.environ.get("PUSH_ADAPTER", "fake")
        if adapter == "fake":
            from notifications.channel.fake_push import FakePushAdapter

            _push_instance = FakePushAdapter()
        else:
            raise ValueError(f"Unknown push adapter: {adapter}")
    return _push_instance


def reset_channels():
    """Reset the channel singleton (useful for testing)."""
    global _push_instance
    _push_instance = None
