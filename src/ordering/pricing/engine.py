"""Pricing engine — customer-specific unit price for a cart line.

The computation is a pure function over catalogue data and the active
pricing rules. Steps run in a fixed order:

    1. list price   — discount price when set and lower than the base price
    2. exclusion    — excluded products skip the tier step
    3. tier         — member %, then wallet % (wallet tier only), multiplicative
    4. bulk         — quantity >= threshold replaces the tier result:
                      percent → list price less the bulk percentage
                      fixed   → the configured value becomes the unit price
    5. rounding     — nearest whole currency unit, halves rounded up
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class CustomerTier(Enum):
    GUEST = "guest"
    MEMBER = "member"
    WALLET = "wallet"


class BulkDiscountType(Enum):
    FIXED = "fixed"
    PERCENT = "percent"


@dataclass(frozen=True)
class BulkDiscount:
    """Quantity-triggered override of the per-unit price."""

    threshold: int
    type: BulkDiscountType
    value: float


@dataclass(frozen=True)
class Product:
    """Catalogue product as seen by the pricing engine (read-only)."""

    id: str
    name: str
    base_price: int
    discount_price: int | None = None
    bulk_discount: BulkDiscount | None = None
    tier_excluded: bool = False
    weight_kg: float | None = None

    @property
    def list_price(self) -> int:
        if self.discount_price is not None and self.discount_price < self.base_price:
            return self.discount_price
        return self.base_price


def _round(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _apply_percent(price: Decimal, pct: float) -> Decimal:
    return price * (Decimal(1) - Decimal(str(pct)) / Decimal(100))


def effective_price(
    product: Product,
    quantity: int,
    tier: CustomerTier,
    member_discount_pct: float = 0,
    wallet_discount_pct: float = 0,
    excluded_product_ids: Iterable[str] = (),
) -> int:
    """Return the unit price a customer of ``tier`` pays for ``quantity`` units."""
    list_price = Decimal(product.list_price)
    price = list_price

    excluded = product.tier_excluded or product.id in set(excluded_product_ids)
    if not excluded:
        if tier in (CustomerTier.MEMBER, CustomerTier.WALLET) and member_discount_pct > 0:
            price = _apply_percent(price, member_discount_pct)
        if tier == CustomerTier.WALLET and wallet_discount_pct > 0:
            price = _apply_percent(price, wallet_discount_pct)

    bulk = product.bulk_discount
    if bulk is not None and quantity > 0 and quantity >= bulk.threshold:
        if bulk.type == BulkDiscountType.PERCENT:
            price = Decimal(_round(_apply_percent(list_price, bulk.value)))
        else:
            # Fixed bulk prices are trusted configuration, even above the tier price
            price = Decimal(str(bulk.value))

    return max(0, _round(price))


def line_total(unit_price: int, quantity: int) -> int:
    return unit_price * quantity
