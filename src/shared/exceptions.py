"""Error taxonomy for the delivery core.

State machine errors are raised to the requesting actor. Location and
notification errors are expected steady states: callers log them and surface
a passive warning, they never undo a committed status change.
"""


class DomainError(Exception):
    """Base class for every error the delivery core raises on purpose."""

    code = "domain_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.context}


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------
class OrderNotFound(DomainError):
    code = "not_found"


class InvalidTransition(DomainError):
    code = "invalid_transition"


class Unauthorized(DomainError):
    code = "unauthorized"


class AlreadyClaimed(DomainError):
    code = "already_claimed"


class InvalidOrder(DomainError):
    code = "invalid_order"


# ---------------------------------------------------------------------------
# Order record store
# ---------------------------------------------------------------------------
class StaleRecord(DomainError):
    """A conditional write found the record no longer matching its expectation."""

    code = "stale_record"


class StoreUnavailable(DomainError):
    code = "store_unavailable"


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------
class SensorUnavailable(DomainError):
    code = "sensor_unavailable"


class SensorError(DomainError):
    code = "sensor_error"

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"

    def __init__(self, message: str, reason: str = POSITION_UNAVAILABLE, **context):
        super().__init__(message, reason=reason, **context)
        self.reason = reason

    @property
    def is_transient(self) -> bool:
        # A missed sample inside the per-sample timeout does not end the watch
        return self.reason == self.TIMEOUT


# ---------------------------------------------------------------------------
# Notifications and reviews
# ---------------------------------------------------------------------------
class DeliveryFailed(DomainError):
    code = "delivery_failed"


class ReviewAlreadySubmitted(DomainError):
    code = "review_already_submitted"


class NotificationNotFound(DomainError):
    code = "not_found"


class ChatSessionInvalid(DomainError, ValueError):
    code = "invalid_chat"


class ReviewNotAllowed(DomainError):
    code = "review_not_allowed"
