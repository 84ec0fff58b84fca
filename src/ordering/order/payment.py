"""Order payment — commands, handler, and the payment-confirmation boundary.

Only the processor's success signal matters here: a confirmed intent moves
the order from PENDING_PAYMENT to PAID, provided the reference matches the
intent attached at checkout.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)

ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
PAYMENT_MISMATCH = "PAYMENT_MISMATCH"
INVALID_STATUS = "INVALID_STATUS"


@ordering.command(part_of="Order")
class AttachPaymentIntent:
    order_id = Identifier(required=True)
    payment_reference_id = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    payment_reference_id = String(max_length=255)


@ordering.command_handler(part_of=Order)
class PaymentHandler:
    @handle(AttachPaymentIntent)
    def attach_payment_intent(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.attach_payment_intent(command.payment_reference_id)
        repo.add(order)

    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.confirm_payment(command.payment_reference_id)
        repo.add(order)
        logger.info("Payment confirmed", order_id=str(order.id))
        return {"order_id": str(order.id), "waybill_no": order.waybill_no}


@dataclass(frozen=True)
class PaymentConfirmation:
    success: bool
    order_id: str
    waybill_no: str | None = None
    error_code: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "orderId": self.order_id, "waybillNo": self.waybill_no}
        return {"success": False, "orderId": self.order_id, "code": self.error_code, "error": self.error}


def confirm_payment(order_id: str, payment_reference_id: str | None) -> PaymentConfirmation:
    """Apply a processor success signal and translate failures into error codes."""
    try:
        result = current_domain.process(
            ConfirmPayment(order_id=order_id, payment_reference_id=payment_reference_id),
            asynchronous=False,
        )
    except ObjectNotFoundError:
        logger.warning("Payment confirmation for unknown order", order_id=order_id)
        return PaymentConfirmation(
            success=False, order_id=order_id, error_code=ORDER_NOT_FOUND, error="Order not found"
        )
    except ValidationError as exc:
        messages = exc.messages
        code = PAYMENT_MISMATCH if "payment_reference_id" in messages else INVALID_STATUS
        logger.warning("Payment confirmation rejected", order_id=order_id, code=code, errors=messages)
        return PaymentConfirmation(success=False, order_id=order_id, error_code=code, error=str(messages))

    return PaymentConfirmation(success=True, order_id=result["order_id"], waybill_no=result["waybill_no"])
