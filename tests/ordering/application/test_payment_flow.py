"""Application tests for payment intents and confirmation."""

import pytest
from ordering.order.order import Order, OrderStatus
from ordering.order.payment import (
    INVALID_STATUS,
    ORDER_NOT_FOUND,
    PAYMENT_MISMATCH,
    AttachPaymentIntent,
    confirm_payment,
)
from protean import current_domain
from protean.exceptions import ValidationError


def _get_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _attach(order_id, reference="pi_123"):
    current_domain.process(AttachPaymentIntent(order_id=order_id, payment_reference_id=reference), asynchronous=False)


class TestAttachPaymentIntent:
    def test_reference_is_stored(self, place_order):
        order_id = place_order()
        _attach(order_id)
        assert _get_order(order_id).payment_reference_id == "pi_123"

    def test_only_while_pending(self, place_order):
        order_id = place_order()
        _attach(order_id)
        confirm_payment(order_id, "pi_123")
        with pytest.raises(ValidationError):
            _attach(order_id, "pi_456")


class TestConfirmPayment:
    def test_matching_reference_marks_order_paid(self, place_order, sms):
        order_id = place_order()
        _attach(order_id)

        result = confirm_payment(order_id, "pi_123")

        assert result.success is True
        assert result.to_dict() == {"success": True, "orderId": order_id, "waybillNo": None}
        assert _get_order(order_id).status == OrderStatus.PAID.value

    def test_paid_notification_sent(self, place_order, sms):
        order_id = place_order(phone="85298765432")
        _attach(order_id)
        confirm_payment(order_id, "pi_123")

        messages = sms.messages_to("85298765432")
        assert len(messages) == 1
        assert order_id in messages[0]

    def test_mismatched_reference_rejected(self, place_order):
        order_id = place_order()
        _attach(order_id)

        result = confirm_payment(order_id, "pi_other")

        assert result.success is False
        assert result.error_code == PAYMENT_MISMATCH
        assert result.to_dict()["code"] == PAYMENT_MISMATCH
        assert _get_order(order_id).status == OrderStatus.PENDING_PAYMENT.value

    def test_without_attached_intent_any_reference_is_accepted(self, place_order):
        order_id = place_order()
        result = confirm_payment(order_id, "pi_from_processor")
        assert result.success is True
        assert _get_order(order_id).payment_reference_id == "pi_from_processor"

    def test_unknown_order(self):
        result = confirm_payment("no-such-order", "pi_123")
        assert result.success is False
        assert result.error_code == ORDER_NOT_FOUND

    def test_second_confirmation_is_an_invalid_status(self, place_order):
        order_id = place_order()
        _attach(order_id)
        confirm_payment(order_id, "pi_123")

        result = confirm_payment(order_id, "pi_123")

        assert result.success is False
        assert result.error_code == INVALID_STATUS
        assert _get_order(order_id).status == OrderStatus.PAID.value
