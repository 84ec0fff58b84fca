"""Order aggregate (CQRS) — the core of the ordering domain.

One Order is created per checkout submission. Customer details, delivery
details and line item prices are snapshots taken at submission and never
change afterwards. Only the transition methods below mutate status, the
waybill, and the carrier response log.

State Machine:
    PENDING_PAYMENT → PAID → PROCESSING → READY_FOR_PICKUP → SHIPPING → COMPLETED
    PROCESSING → ABNORMAL (courier or validation failure)
    ABNORMAL → PROCESSING (manual admin recovery)
    {PAID, PROCESSING, READY_FOR_PICKUP, SHIPPING, ABNORMAL} → REFUND (manual)

Carrier webhooks only ever move an order forward; stale or duplicate pushes
are ignored, and ABNORMAL/REFUND/COMPLETED orders are frozen against them.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Integer,
    String,
    Text,
)

from ordering.domain import ordering
from ordering.order.events import (
    OrderCompleted,
    OrderMarkedAbnormal,
    OrderPlaced,
    OrderReadyForPickup,
    OrderRecovered,
    OrderRefunded,
    PaymentConfirmed,
    PaymentIntentAttached,
    ProcessingStarted,
    ShipmentInTransit,
)
from ordering.pricing.engine import CustomerTier
from ordering.shipping.fees import DeliveryMethod


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    PROCESSING = "processing"
    READY_FOR_PICKUP = "ready_for_pickup"
    SHIPPING = "shipping"
    COMPLETED = "completed"
    ABNORMAL = "abnormal"
    REFUND = "refund"


class TransitionActor(Enum):
    PAYMENT_PROCESSOR = "payment_processor"
    ADMIN = "admin"
    COURIER_DISPATCH = "courier_dispatch"
    CARRIER_WEBHOOK = "carrier_webhook"


class CarrierResponseKind(Enum):
    DISPATCH = "dispatch"
    VALIDATION = "validation"
    ROUTE_PUSH = "route_push"


_PAYMENT = frozenset({TransitionActor.PAYMENT_PROCESSOR})
_ADMIN = frozenset({TransitionActor.ADMIN})
_COURIER = frozenset({TransitionActor.COURIER_DISPATCH})
_WEBHOOK = frozenset({TransitionActor.CARRIER_WEBHOOK})

# from-status → {to-status → actors allowed to trigger it}
_TRANSITIONS: dict[OrderStatus, dict[OrderStatus, frozenset[TransitionActor]]] = {
    OrderStatus.PENDING_PAYMENT: {
        OrderStatus.PAID: _PAYMENT,
    },
    OrderStatus.PAID: {
        OrderStatus.PROCESSING: _ADMIN,
        OrderStatus.REFUND: _ADMIN,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.READY_FOR_PICKUP: _COURIER,
        OrderStatus.ABNORMAL: _COURIER | _ADMIN,
        OrderStatus.SHIPPING: _WEBHOOK,
        OrderStatus.COMPLETED: _WEBHOOK,
        OrderStatus.REFUND: _ADMIN,
    },
    OrderStatus.READY_FOR_PICKUP: {
        OrderStatus.SHIPPING: _WEBHOOK,
        OrderStatus.COMPLETED: _WEBHOOK,
        OrderStatus.REFUND: _ADMIN,
    },
    OrderStatus.SHIPPING: {
        OrderStatus.COMPLETED: _WEBHOOK,
        OrderStatus.REFUND: _ADMIN,
    },
    OrderStatus.ABNORMAL: {
        OrderStatus.PROCESSING: _ADMIN,
        OrderStatus.REFUND: _ADMIN,
    },
    OrderStatus.COMPLETED: {},  # terminal
    OrderStatus.REFUND: {},  # terminal
}

INITIAL_STATUS = OrderStatus.PENDING_PAYMENT
TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.REFUND})
WEBHOOK_FROZEN_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.ABNORMAL, OrderStatus.REFUND})

# Position along the happy path; carrier pushes never move an order backwards.
_PROGRESS = {
    OrderStatus.PENDING_PAYMENT: 0,
    OrderStatus.PAID: 1,
    OrderStatus.PROCESSING: 2,
    OrderStatus.READY_FOR_PICKUP: 3,
    OrderStatus.SHIPPING: 4,
    OrderStatus.COMPLETED: 5,
}


def _check_transition_table() -> None:
    missing = set(OrderStatus) - set(_TRANSITIONS)
    if missing:
        raise RuntimeError(f"Order transition table has no entry for: {sorted(s.value for s in missing)}")
    for source, targets in _TRANSITIONS.items():
        if source in TERMINAL_STATUSES and targets:
            raise RuntimeError(f"Terminal status {source.value} must not have outgoing transitions")
        if source in targets:
            raise RuntimeError(f"Status {source.value} cannot transition to itself")


_check_transition_table()


def allowed_transitions(current: OrderStatus) -> dict[OrderStatus, frozenset[TransitionActor]]:
    return dict(_TRANSITIONS[current])


def can_transition(current: OrderStatus, target: OrderStatus, actor: TransitionActor) -> bool:
    return actor in _TRANSITIONS[current].get(target, frozenset())


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLineItem:
    """A line item frozen at submission: later price changes never touch it."""

    product_id = String(required=True, max_length=100)
    name = String(required=True, max_length=255, sanitize=False)
    unit_price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    line_total = Integer(required=True, min_value=0)

    @invariant.post
    def line_total_matches_unit_price_and_quantity(self):
        if self.line_total != self.unit_price * self.quantity:
            raise ValidationError({"line_total": ["Line total must equal unit price times quantity"]})

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "qty": self.quantity,
            "line_total": self.line_total,
        }


@ordering.entity(part_of="Order")
class CarrierResponse:
    """One entry in the append-only carrier audit log."""

    kind = String(required=True, choices=CarrierResponseKind)
    success = Boolean(default=False)
    request_id = String(max_length=100)
    http_status = Integer()
    waybill_no = String(max_length=100)
    op_code = String(max_length=20)
    message = String(max_length=500, sanitize=False)
    raw_body = Text(sanitize=False)
    recorded_at = DateTime(required=True)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "success": self.success,
            "request_id": self.request_id,
            "http_status": self.http_status,
            "waybill_no": self.waybill_no,
            "op_code": self.op_code,
            "message": self.message,
            "raw_body": self.raw_body,
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
        }


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_name = String(required=True, max_length=100, sanitize=False)
    customer_phone = String(required=True, max_length=30)
    contact_name = String(max_length=100, sanitize=False)
    tier = String(choices=CustomerTier, default=CustomerTier.GUEST.value)
    items = HasMany(OrderLineItem)
    items_count = Integer(default=0)
    delivery_method = String(required=True, choices=DeliveryMethod)
    delivery_address = String(max_length=255, sanitize=False)
    delivery_district = String(max_length=100, sanitize=False)
    delivery_floor = String(max_length=20, sanitize=False)
    delivery_flat = String(max_length=20, sanitize=False)
    locker_point_code = String(max_length=50, sanitize=False)
    subtotal = Integer(required=True, min_value=0)
    delivery_fee = Integer(required=True, min_value=0)
    total = Integer(required=True, min_value=0)
    status = String(choices=OrderStatus, default=INITIAL_STATUS.value)
    payment_reference_id = String(max_length=255)
    waybill_no = String(max_length=100)
    carrier_responses = HasMany(CarrierResponse)
    abnormal_reason = String(max_length=500, sanitize=False)
    refund_reason = String(max_length=500, sanitize=False)
    order_date = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_equals_subtotal_plus_delivery_fee(self):
        if self.total != (self.subtotal or 0) + (self.delivery_fee or 0):
            raise ValidationError({"total": ["Total must equal subtotal plus delivery fee"]})

    @invariant.post
    def subtotal_equals_sum_of_line_totals(self):
        if self.items and self.subtotal != sum(item.line_total for item in self.items):
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of line totals"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        customer_name: str,
        customer_phone: str,
        delivery_method: str,
        lines: list[dict],
        delivery_fee: int,
        tier: str = CustomerTier.GUEST.value,
        contact_name: str | None = None,
        delivery_address: str | None = None,
        delivery_district: str | None = None,
        delivery_floor: str | None = None,
        delivery_flat: str | None = None,
        locker_point_code: str | None = None,
        payment_reference_id: str | None = None,
    ):
        """Create a new order in PENDING_PAYMENT from priced checkout lines.

        Args:
            lines: dicts with product_id, name, unit_price, quantity — unit
                prices already resolved by the pricing engine.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        frozen_lines = [
            {
                "product_id": str(line["product_id"]),
                "name": line["name"],
                "unit_price": int(line["unit_price"]),
                "quantity": int(line["quantity"]),
                "line_total": int(line["unit_price"]) * int(line["quantity"]),
            }
            for line in lines
        ]
        subtotal = sum(line["line_total"] for line in frozen_lines)
        now = datetime.now(UTC)

        order = cls(
            customer_name=customer_name,
            customer_phone=customer_phone,
            contact_name=contact_name or customer_name,
            tier=tier,
            items_count=sum(line["quantity"] for line in frozen_lines),
            delivery_method=delivery_method,
            delivery_address=delivery_address,
            delivery_district=delivery_district,
            delivery_floor=delivery_floor,
            delivery_flat=delivery_flat,
            locker_point_code=locker_point_code,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=subtotal + delivery_fee,
            status=INITIAL_STATUS.value,
            payment_reference_id=payment_reference_id,
            order_date=now,
            updated_at=now,
            items=[OrderLineItem(**line) for line in frozen_lines],
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_name=customer_name,
                customer_phone=customer_phone,
                tier=tier,
                delivery_method=delivery_method,
                items=json.dumps(frozen_lines, ensure_ascii=False),
                items_count=order.items_count,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total=order.total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _transition(self, target: OrderStatus, actor: TransitionActor) -> OrderStatus:
        """Move to ``target`` if the table allows it for ``actor``; return the previous status."""
        current = OrderStatus(self.status)
        actors = _TRANSITIONS[current].get(target)
        if actors is None:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})
        if actor not in actors:
            raise ValidationError(
                {"status": [f"{actor.value} may not move an order from {current.value} to {target.value}"]}
            )
        self.status = target.value
        self.updated_at = datetime.now(UTC)
        return current

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_payment_intent(self, payment_reference_id: str) -> None:
        """Remember the payment processor reference created for this order."""
        if OrderStatus(self.status) != OrderStatus.PENDING_PAYMENT:
            raise ValidationError({"status": ["Payment intents can only be attached while payment is pending"]})
        self.payment_reference_id = payment_reference_id
        self.updated_at = datetime.now(UTC)
        self.raise_(PaymentIntentAttached(order_id=str(self.id), payment_reference_id=payment_reference_id))

    def confirm_payment(self, payment_reference_id: str | None) -> None:
        """Record the payment processor's success signal."""
        if self.payment_reference_id and payment_reference_id != self.payment_reference_id:
            raise ValidationError({"payment_reference_id": ["Payment reference does not match this order"]})

        self._transition(OrderStatus.PAID, TransitionActor.PAYMENT_PROCESSOR)
        if payment_reference_id:
            self.payment_reference_id = payment_reference_id
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_reference_id=payment_reference_id,
                customer_phone=self.customer_phone,
                confirmed_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Admin batch operations
    # -------------------------------------------------------------------
    def start_processing(self) -> None:
        """Admin cutoff: the paid order enters preparation."""
        self._transition(OrderStatus.PROCESSING, TransitionActor.ADMIN)
        self.raise_(
            ProcessingStarted(
                order_id=str(self.id),
                customer_phone=self.customer_phone,
                started_at=self.updated_at,
            )
        )

    def refund(self, reason: str) -> None:
        previous = self._transition(OrderStatus.REFUND, TransitionActor.ADMIN)
        self.refund_reason = reason
        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                previous_status=previous.value,
                reason=reason,
                refunded_at=self.updated_at,
            )
        )

    def recover(self, note: str | None = None) -> None:
        """Manual override releasing an abnormal order back to processing."""
        if OrderStatus(self.status) != OrderStatus.ABNORMAL:
            raise ValidationError({"status": ["Only abnormal orders can be recovered"]})
        self._transition(OrderStatus.PROCESSING, TransitionActor.ADMIN)
        self.abnormal_reason = None
        self.raise_(OrderRecovered(order_id=str(self.id), note=note or "", recovered_at=self.updated_at))

    # -------------------------------------------------------------------
    # Courier dispatch
    # -------------------------------------------------------------------
    def record_carrier_response(
        self,
        kind: CarrierResponseKind,
        success: bool,
        raw_body: str | None = None,
        request_id: str | None = None,
        http_status: int | None = None,
        waybill_no: str | None = None,
        op_code: str | None = None,
        message: str | None = None,
    ) -> None:
        """Append an entry to the carrier audit log. Entries are never removed."""
        self.add_carrier_responses(
            CarrierResponse(
                kind=kind.value,
                success=success,
                request_id=request_id,
                http_status=http_status,
                waybill_no=waybill_no,
                op_code=op_code,
                message=(message or "")[:500] or None,
                raw_body=raw_body,
                recorded_at=datetime.now(UTC),
            )
        )

    def mark_ready_for_pickup(self, waybill_no: str, request_id: str | None = None) -> None:
        """The courier accepted the order and issued ``waybill_no``."""
        if not waybill_no:
            raise ValidationError({"waybill_no": ["A waybill number is required to mark an order ready for pickup"]})
        self._transition(OrderStatus.READY_FOR_PICKUP, TransitionActor.COURIER_DISPATCH)
        self.waybill_no = waybill_no
        self.raise_(
            OrderReadyForPickup(
                order_id=str(self.id),
                waybill_no=waybill_no,
                request_id=request_id,
                customer_phone=self.customer_phone,
                dispatched_at=self.updated_at,
            )
        )

    def mark_abnormal(self, reason: str, actor: TransitionActor = TransitionActor.COURIER_DISPATCH) -> None:
        previous = self._transition(OrderStatus.ABNORMAL, actor)
        self.abnormal_reason = reason[:500]
        self.raise_(
            OrderMarkedAbnormal(
                order_id=str(self.id),
                previous_status=previous.value,
                reason=self.abnormal_reason,
                occurred_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Carrier route push
    # -------------------------------------------------------------------
    def apply_carrier_route(
        self,
        target: OrderStatus,
        op_code: str | None = None,
        remark: str | None = None,
        raw_body: str | None = None,
    ) -> bool:
        """Advance the order from a carrier route push.

        Returns False, leaving the order untouched, when the order is frozen
        (abnormal, refund, completed), when the push would not move the order
        forward, or when the transition is not in the table.
        """
        current = OrderStatus(self.status)
        if current in WEBHOOK_FROZEN_STATUSES:
            return False
        if _PROGRESS.get(target, -1) <= _PROGRESS.get(current, -1):
            return False
        if not can_transition(current, target, TransitionActor.CARRIER_WEBHOOK):
            return False

        self._transition(target, TransitionActor.CARRIER_WEBHOOK)
        self.record_carrier_response(
            CarrierResponseKind.ROUTE_PUSH,
            success=True,
            raw_body=raw_body,
            waybill_no=self.waybill_no,
            op_code=op_code,
            message=remark,
        )
        if target == OrderStatus.COMPLETED:
            self.raise_(
                OrderCompleted(
                    order_id=str(self.id),
                    waybill_no=self.waybill_no or "",
                    op_code=op_code,
                    customer_phone=self.customer_phone,
                    completed_at=self.updated_at,
                )
            )
        else:
            self.raise_(
                ShipmentInTransit(
                    order_id=str(self.id),
                    waybill_no=self.waybill_no or "",
                    op_code=op_code,
                    customer_phone=self.customer_phone,
                    occurred_at=self.updated_at,
                )
            )
        return True

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    @property
    def last_carrier_response(self) -> CarrierResponse | None:
        responses = list(self.carrier_responses or [])
        if not responses:
            return None
        # Latest by timestamp; ties go to the entry appended last
        return max(enumerate(responses), key=lambda pair: (pair[1].recorded_at, pair[0]))[1]

    def to_record(self) -> dict:
        """Persisted record shape expected by existing integrations (snake_case)."""
        last = self.last_carrier_response
        return {
            "id": str(self.id),
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "total": self.total,
            "subtotal": self.subtotal,
            "delivery_fee": self.delivery_fee,
            "status": self.status,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "items_count": self.items_count,
            "line_items": [item.to_dict() for item in self.items or []],
            "delivery_method": self.delivery_method,
            "delivery_address": self.delivery_address,
            "delivery_district": self.delivery_district,
            "delivery_floor": self.delivery_floor,
            "delivery_flat": self.delivery_flat,
            "locker_point_code": self.locker_point_code,
            "contact_name": self.contact_name,
            "waybill_no": self.waybill_no,
            "tracking_number": self.waybill_no,
            "abnormal_reason": self.abnormal_reason,
            "sf_responses": [entry.to_dict() for entry in self.carrier_responses or []],
            "last_carrier_response": last.to_dict() if last else None,
        }
