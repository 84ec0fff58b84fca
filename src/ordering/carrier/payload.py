"""Carrier order-creation payload — build and validate before signing.

Validation fails closed: a payload with any required field missing is never
signed or sent. The error lists every missing field path so an operator can
fix the order in one pass.
"""

from ordering.carrier.product_types import express_type_for
from ordering.carrier.settings import CarrierSettings

CARGO_NAME = "冷凍食品"

SENDER_CONTACT_TYPE = 1
RECEIVER_CONTACT_TYPE = 2

_REQUIRED_TOP_LEVEL = ("orderId", "language", "monthlyCard", "expressTypeId", "payMethod")
_REQUIRED_CONTACT_FIELDS = ("contact", "tel", "address", "province", "city")


class PayloadValidationError(Exception):
    """Raised when a carrier payload is missing required fields."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Carrier payload missing fields: {', '.join(self.missing)}")


def receiver_address(order) -> str:
    """Single-line receiver address: district, street, floor (樓) and flat (室)."""
    if order.delivery_method == "locker":
        parts = [order.delivery_address, order.locker_point_code]
    else:
        parts = [
            order.delivery_district,
            order.delivery_address,
            f"{order.delivery_floor}樓" if order.delivery_floor else "",
            f"{order.delivery_flat}室" if order.delivery_flat else "",
        ]
    return " ".join(part.strip() for part in parts if part and part.strip())


def build_create_order_payload(
    order,
    settings: CarrierSettings,
    weights: dict[str, float] | None = None,
) -> dict:
    """Build the msgData body for an order-creation request."""
    weights = weights or {}
    items = list(order.items or [])

    total_weight = 0.0
    for item in items:
        per_unit = weights.get(item.product_id) or settings.default_weight_kg
        total_weight += per_unit * item.quantity
    total_weight = round(total_weight, 2) if items else 0.0

    return {
        "language": settings.language,
        "orderId": str(order.id),
        "monthlyCard": settings.monthly_card,
        "expressTypeId": express_type_for(order.delivery_method, settings.express_type_id),
        "payMethod": settings.pay_method,
        "parcelQty": 1,
        "totalWeight": total_weight,
        "contactInfoList": [
            {
                "contactType": SENDER_CONTACT_TYPE,
                "contact": settings.sender_name,
                "tel": settings.sender_phone,
                "address": settings.sender_address,
                "province": settings.sender_region,
                "city": settings.sender_city,
            },
            {
                "contactType": RECEIVER_CONTACT_TYPE,
                "contact": order.contact_name or order.customer_name,
                "tel": order.customer_phone,
                "address": receiver_address(order),
                "province": settings.sender_region,
                "city": settings.sender_city,
                "county": order.delivery_district or "",
            },
        ],
        "cargoDetails": [
            {
                "name": CARGO_NAME,
                "count": sum(item.quantity for item in items),
                "unit": "件",
            }
        ],
    }


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def missing_fields(payload: dict) -> list[str]:
    """Return the paths of every required field that is absent or blank."""
    missing = [name for name in _REQUIRED_TOP_LEVEL if _blank(payload.get(name))]

    parcel_qty = payload.get("parcelQty")
    if not isinstance(parcel_qty, int) or parcel_qty < 1:
        missing.append("parcelQty")

    weight = payload.get("totalWeight")
    if not isinstance(weight, (int, float)) or weight <= 0:
        missing.append("totalWeight")

    contacts = payload.get("contactInfoList") or []
    if len(contacts) < 2:
        missing.append("contactInfoList")
    for index, contact in enumerate(contacts[:2]):
        for name in _REQUIRED_CONTACT_FIELDS:
            if _blank(contact.get(name)):
                missing.append(f"contactInfoList[{index}].{name}")

    cargo = payload.get("cargoDetails") or []
    if not cargo:
        missing.append("cargoDetails")
    for index, line in enumerate(cargo):
        if _blank(line.get("name")):
            missing.append(f"cargoDetails[{index}].name")
        count = line.get("count")
        if not isinstance(count, int) or count < 1:
            missing.append(f"cargoDetails[{index}].count")

    return missing


def validate_create_order_payload(payload: dict) -> None:
    missing = missing_fields(payload)
    if missing:
        raise PayloadValidationError(missing)
