"""Courier dispatch — hand one processing order to the carrier.

One command, one order, one unit of work. The payload is validated before
anything is signed; a structurally incomplete order goes to ABNORMAL with the
missing field paths and the carrier is never called. Carrier failures of any
kind (timeout, non-2xx, non-JSON, no waybill) also land the order in
ABNORMAL, and every attempt is appended to the order's carrier log.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.carrier import get_carrier
from ordering.carrier.payload import (
    PayloadValidationError,
    build_create_order_payload,
    missing_fields,
    validate_create_order_payload,
)
from ordering.carrier.port import ShipmentResult
from ordering.carrier.settings import CarrierSettings
from ordering.carrier.signing import new_request_id
from ordering.catalog import get_catalog
from ordering.domain import ordering
from ordering.order.order import CarrierResponseKind, Order, OrderStatus

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class DispatchOrderToCourier:
    order_id = Identifier(required=True)


def _product_weights(order: Order) -> dict[str, float]:
    catalog = get_catalog()
    weights = {}
    for item in order.items or []:
        product = catalog.get_product(item.product_id)
        if product is not None and product.weight_kg:
            weights[item.product_id] = product.weight_kg
    return weights


def dispatch_problems(order: Order, settings: CarrierSettings) -> list[str]:
    """Reasons this order cannot be sent to the carrier; empty when it can."""
    if OrderStatus(order.status) != OrderStatus.PROCESSING:
        return [f"Order is {order.status}, expected processing"]
    payload = build_create_order_payload(order, settings, _product_weights(order))
    return [f"Missing {path}" for path in missing_fields(payload)]


@ordering.command_handler(part_of=Order)
class CourierDispatchHandler:
    @handle(DispatchOrderToCourier)
    def dispatch_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if OrderStatus(order.status) != OrderStatus.PROCESSING:
            logger.info("Order not in processing, skipping dispatch", order_id=str(order.id), status=order.status)
            return {"order_id": str(order.id), "success": False, "error": f"Order is {order.status}"}

        carrier = get_carrier()
        payload = build_create_order_payload(order, carrier.settings, _product_weights(order))

        try:
            validate_create_order_payload(payload)
        except PayloadValidationError as exc:
            reason = f"Missing fields: {', '.join(exc.missing)}"
            order.record_carrier_response(CarrierResponseKind.VALIDATION, success=False, message=reason)
            order.mark_abnormal(reason)
            repo.add(order)
            logger.warning("Carrier payload incomplete", order_id=str(order.id), missing=exc.missing)
            return {"order_id": str(order.id), "success": False, "error": reason}

        try:
            result = carrier.create_order(payload)
        except Exception as exc:
            logger.error("Carrier adapter raised", order_id=str(order.id), error=str(exc))
            result = ShipmentResult(success=False, request_id=new_request_id(), error=f"Carrier error: {exc}")

        order.record_carrier_response(
            CarrierResponseKind.DISPATCH,
            success=result.success,
            raw_body=result.raw_body,
            request_id=result.request_id,
            http_status=result.http_status,
            waybill_no=result.waybill_no,
            message=result.error,
        )
        if result.success:
            order.mark_ready_for_pickup(result.waybill_no, request_id=result.request_id)
            logger.info(
                "Order ready for pickup",
                order_id=str(order.id),
                waybill_no=result.waybill_no,
                request_id=result.request_id,
            )
        else:
            order.mark_abnormal(result.error or "Carrier dispatch failed")
            logger.warning(
                "Carrier dispatch failed",
                order_id=str(order.id),
                request_id=result.request_id,
                http_status=result.http_status,
                error=result.error,
                body=(result.raw_body or "")[:300],
            )
        repo.add(order)

        return {
            "order_id": str(order.id),
            "success": result.success,
            "waybill_no": result.waybill_no,
            "request_id": result.request_id,
            "error": result.error,
        }


@ordering.command(part_of="Order")
class MarkDispatchFailed:
    """Degrade an order to ABNORMAL after its dispatch unit of work crashed."""

    order_id = Identifier(required=True)
    reason = Text(required=True, sanitize=False)


@ordering.command_handler(part_of=Order)
class DispatchFailureHandler:
    @handle(MarkDispatchFailed)
    def mark_dispatch_failed(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if OrderStatus(order.status) != OrderStatus.PROCESSING:
            return
        order.record_carrier_response(CarrierResponseKind.DISPATCH, success=False, message=command.reason)
        order.mark_abnormal(command.reason)
        repo.add(order)
