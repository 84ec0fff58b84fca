"""Fire-and-forget customer notifications after order status changes.

A failed or skipped notification is logged and never propagated: order
processing must not depend on the SMS provider.
"""

import structlog

from notifications.channel import get_sms_channel
from notifications.channel.sms_port import SMSReceipt
from notifications.templates import render_status_message

logger = structlog.get_logger(__name__)


def notify_order_status(
    status: str,
    order_id: str,
    customer_phone: str | None,
    waybill_no: str | None = None,
) -> SMSReceipt | None:
    body = render_status_message(status, order_id, waybill_no)
    if body is None:
        return None
    if not customer_phone:
        logger.info("No customer phone, notification skipped", order_id=order_id, status=status)
        return None

    try:
        receipt = get_sms_channel().send(customer_phone, body)
    except Exception as e:
        logger.error("Notification dispatch failed", order_id=order_id, status=status, error=str(e))
        return None

    if receipt.sent:
        logger.info("Notification sent", order_id=order_id, status=status, message_id=receipt.message_id)
    else:
        logger.warning("Notification not delivered", order_id=order_id, status=status, error=receipt.error)
    return receipt
