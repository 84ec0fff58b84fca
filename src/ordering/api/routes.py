"""FastAPI routes for the Ordering domain — checkout, payment, admin, carrier.

Handlers are plain functions so FastAPI runs them in its threadpool; carrier
calls and repository access block.
"""

import json
import os

import structlog
from fastapi import APIRouter, Form, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AttachPaymentIntentRequest,
    CarrierConfigResponse,
    ConfigureCarrierRequest,
    ConfirmPaymentRequest,
    DispatchRequest,
    OrderSelectionRequest,
    PlaceOrderRequest,
    PlaceOrderResponse,
    ReasonRequest,
    RecoverRequest,
    ShippingRuleRequest,
    ShippingRuleResponse,
    StatusResponse,
)
from ordering.carrier import get_carrier
from ordering.carrier.fake_adapter import FakeCarrier
from ordering.carrier.routes import MalformedRoutePush, RoutePush
from ordering.dispatch.courier import dispatch_one, dispatch_to_courier, preview_dispatch
from ordering.dispatch.cutoff import cutoff
from ordering.dispatch.documents import aggregate_pick_list, individual_invoices
from ordering.dispatch.selection import unique_ids
from ordering.domain import ordering
from ordering.order.administration import HoldOrder, RecoverOrder, RefundOrder
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order
from ordering.order.payment import ORDER_NOT_FOUND, AttachPaymentIntent, confirm_payment
from ordering.order.tracking import ProcessRoutePush
from ordering.shipping.fees import DeliveryMethod
from ordering.shipping.rules import ShippingRule, UpsertShippingRule

logger = structlog.get_logger(__name__)

CARRIER_ACK = {"return_code": "0000", "return_msg": "success"}

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlaceOrderResponse)
def place_order(body: PlaceOrderRequest) -> PlaceOrderResponse:
    """Submit a checkout; prices and the delivery fee are computed server side."""
    command = PlaceOrder(
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        contact_name=body.contact_name,
        tier=body.tier,
        delivery_method=body.delivery_method,
        items=json.dumps([line.model_dump() for line in body.items]),
        delivery_address=body.delivery_address,
        delivery_district=body.delivery_district,
        delivery_floor=body.delivery_floor,
        delivery_flat=body.delivery_flat,
        locker_point_code=body.locker_point_code,
        payment_reference_id=body.payment_reference_id,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return PlaceOrderResponse(
        order_id=order_id,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        total=order.total,
        status=order.status,
    )


@order_router.get("/{order_id}")
def get_order(order_id: str) -> dict:
    """Persisted order record, including the last raw carrier response."""
    return current_domain.repository_for(Order).get(order_id).to_record()


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", response_model=StatusResponse)
def attach_payment_intent(body: AttachPaymentIntentRequest) -> StatusResponse:
    command = AttachPaymentIntent(order_id=body.order_id, payment_reference_id=body.payment_reference_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="intent_attached")


@payment_router.post("/confirm")
def confirm_order_payment(body: ConfirmPaymentRequest):
    """Payment processor success signal: PENDING_PAYMENT → PAID."""
    outcome = confirm_payment(body.order_id, body.payment_reference_id)
    if outcome.success:
        return outcome.to_dict()
    status_code = 404 if outcome.error_code == ORDER_NOT_FOUND else 409
    return JSONResponse(status_code=status_code, content=outcome.to_dict())


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.post("/orders/cutoff")
def cutoff_orders(body: OrderSelectionRequest) -> dict:
    return cutoff(body.order_ids).to_dict()


@admin_router.post("/orders/pick-list")
def pick_list(body: OrderSelectionRequest) -> dict:
    return {"lines": [line.to_dict() for line in aggregate_pick_list(body.order_ids)]}


@admin_router.post("/orders/invoices")
def invoices(body: OrderSelectionRequest) -> dict:
    return {"invoices": individual_invoices(body.order_ids)}


@admin_router.post("/orders/dispatch/preview")
def dispatch_preview(body: OrderSelectionRequest) -> dict:
    return preview_dispatch(body.order_ids).to_dict()


@admin_router.post("/orders/dispatch")
def dispatch(body: DispatchRequest) -> dict:
    """Dispatch selected orders to the carrier and return the batch summary."""
    return dispatch_to_courier(body.order_ids, force=body.force, batch_id=body.batch_id).to_dict()


@admin_router.post("/orders/dispatch/stream")
def dispatch_stream(body: DispatchRequest):
    """Stream one NDJSON line per order as the carrier calls complete.

    Without ``force`` the selection must pass the preview checks first.
    """
    preview = preview_dispatch(body.order_ids)
    if preview.problematic and not body.force:
        return JSONResponse(status_code=409, content={"requiresConfirmation": True, **preview.to_dict()})

    def _lines():
        # Each step may run on a different worker thread
        for order_id in unique_ids(preview.valid):
            with ordering.domain_context():
                outcome = dispatch_one(order_id)
            yield json.dumps(outcome.to_dict(), ensure_ascii=False) + "\n"

    return StreamingResponse(_lines(), media_type="application/x-ndjson")


@admin_router.post("/orders/{order_id}/refund", response_model=StatusResponse)
def refund_order(order_id: str, body: ReasonRequest) -> StatusResponse:
    current_domain.process(RefundOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return StatusResponse(status="refunded")


@admin_router.post("/orders/{order_id}/recover", response_model=StatusResponse)
def recover_order(order_id: str, body: RecoverRequest) -> StatusResponse:
    current_domain.process(RecoverOrder(order_id=order_id, note=body.note), asynchronous=False)
    return StatusResponse(status="processing")


@admin_router.post("/orders/{order_id}/hold", response_model=StatusResponse)
def hold_order(order_id: str, body: ReasonRequest) -> StatusResponse:
    current_domain.process(HoldOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return StatusResponse(status="abnormal")


@admin_router.put("/shipping-rules/{delivery_method}", response_model=ShippingRuleResponse)
def upsert_shipping_rule(delivery_method: DeliveryMethod, body: ShippingRuleRequest) -> ShippingRuleResponse:
    command = UpsertShippingRule(delivery_method=delivery_method.value, fee=body.fee, threshold=body.threshold)
    rule_id = current_domain.process(command, asynchronous=False)
    rule = current_domain.repository_for(ShippingRule).get(rule_id)
    return ShippingRuleResponse(
        id=rule_id, delivery_method=rule.delivery_method, fee=rule.fee, threshold=rule.threshold
    )


@admin_router.post("/carrier/configure", response_model=CarrierConfigResponse)
def configure_carrier(body: ConfigureCarrierRequest) -> CarrierConfigResponse:
    """Configure the FakeCarrier behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Carrier configuration not available in production")

    carrier = get_carrier()
    if not isinstance(carrier, FakeCarrier):
        raise HTTPException(status_code=400, detail="Carrier configuration only available for FakeCarrier")

    carrier.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    carrier.fail_for = set(body.fail_order_ids)
    carrier.timeout_for = set(body.timeout_order_ids)
    return CarrierConfigResponse(
        carrier=type(carrier).__name__,
        should_succeed=carrier.should_succeed,
        failure_reason=carrier.failure_reason,
    )


# ---------------------------------------------------------------------------
# Carrier Webhook Router
# ---------------------------------------------------------------------------
carrier_router = APIRouter(prefix="/carrier", tags=["carrier"])


@carrier_router.post("/webhooks/route-push")
def route_push(
    partner_id: str = Form(default="", alias="partnerID"),
    request_id: str = Form(default="", alias="requestID"),
    service_code: str = Form(default="", alias="serviceCode"),
    timestamp: str = Form(default=""),
    msg_digest: str = Form(default="", alias="msgDigest"),
    msg_data: str = Form(default="", alias="msgData"),
):
    """SF route push. Acknowledged with 0000 unless the request itself is bad."""
    log = logger.bind(request_id=request_id, partner_id=partner_id, service_code=service_code)
    carrier = get_carrier()

    if not carrier.settings.checkword:
        log.error("Route push received but no checkword is configured")
        return JSONResponse(status_code=500, content={"return_code": "0001", "return_msg": "checkword not configured"})

    if not carrier.verify_route_push(msg_data, timestamp, msg_digest):
        log.error("Route push digest verification failed", received_digest=msg_digest)
        return JSONResponse(
            status_code=403,
            content={"error": "Signature verification failed", "code": "DIGEST_MISMATCH"},
        )

    try:
        RoutePush.parse(msg_data)
    except MalformedRoutePush:
        log.error("Route push msgData is malformed", msg_data=msg_data[:200])
        return JSONResponse(status_code=400, content={"error": "Invalid msgData"})

    try:
        result = current_domain.process(
            ProcessRoutePush(request_id=request_id, msg_data=msg_data),
            asynchronous=False,
        )
        log.info("Route push processed", result=result)
    except Exception as e:
        log.error("Route push processing failed", error=str(e))

    return CARRIER_ACK
