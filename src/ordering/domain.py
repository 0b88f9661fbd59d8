"""Ordering bounded context — order lifecycle, payment and driver claims.

Owns every write to the shared order record. Accepted writes are announced
to other contexts as the shared ``Ordering.*`` event contracts.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
