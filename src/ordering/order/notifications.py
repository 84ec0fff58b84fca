"""Customer notifications triggered by order status events."""

from protean.utils.mixins import handle

from notifications.dispatch import notify_order_status
from ordering.domain import ordering
from ordering.order.events import (
    OrderCompleted,
    OrderReadyForPickup,
    PaymentConfirmed,
    ProcessingStarted,
    ShipmentInTransit,
)
from ordering.order.order import Order, OrderStatus


@ordering.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Sends a status text to the customer; never fails the originating command."""

    @handle(PaymentConfirmed)
    def on_payment_confirmed(self, event: PaymentConfirmed) -> None:
        notify_order_status(OrderStatus.PAID.value, str(event.order_id), event.customer_phone)

    @handle(ProcessingStarted)
    def on_processing_started(self, event: ProcessingStarted) -> None:
        notify_order_status(OrderStatus.PROCESSING.value, str(event.order_id), event.customer_phone)

    @handle(OrderReadyForPickup)
    def on_ready_for_pickup(self, event: OrderReadyForPickup) -> None:
        notify_order_status(
            OrderStatus.READY_FOR_PICKUP.value, str(event.order_id), event.customer_phone, event.waybill_no
        )

    @handle(ShipmentInTransit)
    def on_shipment_in_transit(self, event: ShipmentInTransit) -> None:
        notify_order_status(OrderStatus.SHIPPING.value, str(event.order_id), event.customer_phone, event.waybill_no)

    @handle(OrderCompleted)
    def on_order_completed(self, event: OrderCompleted) -> None:
        notify_order_status(OrderStatus.COMPLETED.value, str(event.order_id), event.customer_phone, event.waybill_no)
