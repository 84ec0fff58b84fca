"""Ordering bounded context — Order Lifecycle and Courier Logistics.

Handles checkout pricing, the order state machine, the courier (SF Express)
integration, and the admin batch pipeline that drives paid orders through
cutoff, picking, and carrier dispatch.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
