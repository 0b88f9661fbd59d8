"""Notifications bounded context — Cross-domain event consumer for push dispatch.

Consumes Ordering events and tells buyers, store owners and drivers what
happened to their orders. Keeps a per-user inbox of every notification
attempt, delivered or not.
"""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)
