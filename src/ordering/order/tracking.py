"""Carrier route push — advance orders from verified tracking webhooks.

Orders are matched by waybill number; the carrier never sees our order id.
Every skip (unknown or shared waybill, no actionable code, frozen or stale
order) is logged and acknowledged, never raised back to the carrier.
"""

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from ordering.carrier.routes import RoutePush, target_status_for
from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)

UPDATED = "updated"
SKIPPED = "skipped"


@ordering.command(part_of="Order")
class ProcessRoutePush:
    """A route push whose digest has already been verified."""

    request_id = String(max_length=100)
    msg_data = Text(required=True, sanitize=False)


@ordering.command_handler(part_of=Order)
class RoutePushHandler:
    @handle(ProcessRoutePush)
    def process_route_push(self, command):
        push = RoutePush.parse(command.msg_data)
        log = logger.bind(request_id=command.request_id, waybill_no=push.waybill_no)

        if not push.waybill_no or not push.routes:
            log.info("Route push without waybill or routes, skipping")
            return SKIPPED

        target = target_status_for(push.routes)
        if target is None:
            log.info("No actionable route code", op_codes=[r.op_code for r in push.routes])
            return SKIPPED
        status, event = target

        repo = current_domain.repository_for(Order)
        matches = repo._dao.query.filter(waybill_no=push.waybill_no).all().items
        if not matches:
            log.warning("No order found for waybill")
            return SKIPPED
        if len(matches) > 1:
            log.warning("Waybill shared by several orders, skipping", order_ids=[str(o.id) for o in matches])
            return SKIPPED

        order = repo.get(matches[0].id)
        applied = order.apply_carrier_route(
            status,
            op_code=event.op_code,
            remark=event.remark,
            raw_body=command.msg_data,
        )
        if not applied:
            log.info(
                "Route push ignored for order state",
                order_id=str(order.id),
                status=order.status,
                target=status.value,
            )
            return SKIPPED

        repo.add(order)
        log.info("Order advanced by route push", order_id=str(order.id), status=order.status, op_code=event.op_code)
        return UPDATED
