"""Order domain events — immutable facts about order lifecycle changes.

All events are past tense, versioned, and carry the customer phone and
waybill where a downstream notification needs them.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A checkout was submitted and the order awaits payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_name = String(required=True, sanitize=False)
    customer_phone = String(required=True)
    tier = String(required=True)
    delivery_method = String(required=True)
    items = Text(required=True, sanitize=False)  # JSON list of frozen line items
    items_count = Integer(required=True)
    subtotal = Integer(required=True)
    delivery_fee = Integer(required=True)
    total = Integer(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentIntentAttached:
    """A payment processor intent was created for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference_id = String(required=True)


@ordering.event(part_of="Order")
class PaymentConfirmed:
    """The payment processor confirmed the order's payment intent."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference_id = String()
    customer_phone = String()
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ProcessingStarted:
    """The order was included in an admin cutoff and is being prepared."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_phone = String()
    started_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderReadyForPickup:
    """The courier accepted the order and issued a waybill."""

    __version__ = 1

    order_id = Identifier(required=True)
    waybill_no = String(required=True)
    request_id = String()
    customer_phone = String()
    dispatched_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderMarkedAbnormal:
    """Dispatch or validation failed; the order needs manual attention."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(required=True, sanitize=False)
    occurred_at = DateTime(required=True)


@ordering.event(part_of="Order")
class ShipmentInTransit:
    """The carrier reported the parcel collected or moving."""

    __version__ = 1

    order_id = Identifier(required=True)
    waybill_no = String(required=True)
    op_code = String()
    customer_phone = String()
    occurred_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCompleted:
    """The carrier reported the parcel signed for."""

    __version__ = 1

    order_id = Identifier(required=True)
    waybill_no = String(required=True)
    op_code = String()
    customer_phone = String()
    completed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRefunded:
    """An admin refunded the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(required=True, sanitize=False)
    refunded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRecovered:
    """An admin released an abnormal order back to processing."""

    __version__ = 1

    order_id = Identifier(required=True)
    note = String(sanitize=False)
    recovered_at = DateTime(required=True)
