"""Checkout submission — price the cart and freeze it into a new Order.

Unit prices come from the pricing engine, the delivery fee from the shipping
calculator over a snapshot of the fee table. Everything is copied onto the
Order so later catalogue or rule changes never touch historical orders.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from ordering.catalog import get_catalog
from ordering.domain import ordering
from ordering.order.order import Order
from ordering.pricing.engine import CustomerTier, effective_price
from ordering.pricing.rules import get_pricing_rules
from ordering.shipping.fees import DeliveryMethod, shipping_fee
from ordering.shipping.rules import load_fee_table

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    """Submit a checkout: cart lines plus customer and delivery snapshot."""

    customer_name = String(required=True, max_length=100, sanitize=False)
    customer_phone = String(required=True, max_length=30)
    contact_name = String(max_length=100, sanitize=False)
    tier = String(choices=CustomerTier, default=CustomerTier.GUEST.value)
    delivery_method = String(required=True, choices=DeliveryMethod)
    items = Text(required=True, sanitize=False)  # JSON list of {"product_id", "quantity"}
    delivery_address = String(max_length=255, sanitize=False)
    delivery_district = String(max_length=100, sanitize=False)
    delivery_floor = String(max_length=20, sanitize=False)
    delivery_flat = String(max_length=20, sanitize=False)
    locker_point_code = String(max_length=50, sanitize=False)
    payment_reference_id = String(max_length=255)


def _cart_lines(raw_items) -> dict[str, int]:
    """Merge cart lines by product, keeping first-seen order."""
    items = json.loads(raw_items) if isinstance(raw_items, str) else raw_items
    if not items:
        raise ValidationError({"items": ["Cart is empty"]})

    quantities: dict[str, int] = {}
    for line in items:
        quantity = int(line.get("quantity", line.get("qty", 0)))
        if quantity < 1:
            raise ValidationError({"items": [f"Quantity for product {line.get('product_id')} must be at least 1"]})
        product_id = str(line["product_id"])
        quantities[product_id] = quantities.get(product_id, 0) + quantity
    return quantities


def _check_delivery_details(command) -> None:
    if DeliveryMethod(command.delivery_method) == DeliveryMethod.HOME:
        missing = [
            name for name in ("delivery_address", "delivery_district") if not (getattr(command, name) or "").strip()
        ]
        if missing:
            raise ValidationError({name: ["Required for home delivery"] for name in missing})
    elif not (command.locker_point_code or "").strip():
        raise ValidationError({"locker_point_code": ["Required for locker delivery"]})


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        _check_delivery_details(command)

        catalog = get_catalog()
        rules = get_pricing_rules()
        tier = CustomerTier(command.tier or CustomerTier.GUEST.value)

        lines = []
        for product_id, quantity in _cart_lines(command.items).items():
            product = catalog.get_product(product_id)
            if product is None:
                raise ValidationError({"items": [f"Unknown product {product_id}"]})
            lines.append(
                {
                    "product_id": product.id,
                    "name": product.name,
                    "unit_price": effective_price(
                        product,
                        quantity,
                        tier,
                        member_discount_pct=rules.member_discount_pct,
                        wallet_discount_pct=rules.wallet_discount_pct,
                        excluded_product_ids=rules.excluded_product_ids,
                    ),
                    "quantity": quantity,
                }
            )

        subtotal = sum(line["unit_price"] * line["quantity"] for line in lines)
        delivery_fee = shipping_fee(subtotal, command.delivery_method, load_fee_table())

        order = Order.create(
            customer_name=command.customer_name,
            customer_phone=command.customer_phone,
            delivery_method=command.delivery_method,
            lines=lines,
            delivery_fee=delivery_fee,
            tier=tier.value,
            contact_name=command.contact_name,
            delivery_address=command.delivery_address,
            delivery_district=command.delivery_district,
            delivery_floor=command.delivery_floor,
            delivery_flat=command.delivery_flat,
            locker_point_code=command.locker_point_code,
            payment_reference_id=command.payment_reference_id,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            tier=tier.value,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total=order.total,
        )
        return str(order.id)
