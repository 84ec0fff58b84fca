"""Admin order actions — cutoff, refund, recovery, manual hold.

Each command touches exactly one order; batch actions in ordering.dispatch
issue one command per selected order so every order gets its own unit of work.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, TransitionActor

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class StartProcessing:
    """Include a paid order in the admin cutoff."""

    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500, sanitize=False)


@ordering.command(part_of="Order")
class RecoverOrder:
    """Manual override: release an abnormal order back to processing."""

    order_id = Identifier(required=True)
    note = String(max_length=500, sanitize=False)


@ordering.command(part_of="Order")
class HoldOrder:
    """Manually park a processing order as abnormal."""

    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500, sanitize=False)


@ordering.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(StartProcessing)
    def start_processing(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.start_processing()
        repo.add(order)

    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.refund(command.reason)
        repo.add(order)
        logger.info("Order refunded", order_id=str(order.id), reason=command.reason)

    @handle(RecoverOrder)
    def recover_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.recover(command.note)
        repo.add(order)
        logger.info("Abnormal order recovered", order_id=str(order.id))

    @handle(HoldOrder)
    def hold_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_abnormal(command.reason, actor=TransitionActor.ADMIN)
        repo.add(order)
        logger.info("Order held for manual attention", order_id=str(order.id), reason=command.reason)
