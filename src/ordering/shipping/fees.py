"""Shipping fee calculator — pure function over an injected fee table.

The fee table is a snapshot handed in by the caller; it is never read from
module state here. Methods missing from the snapshot fall back to
FALLBACK_FEE_TABLE so a partially configured store still prices checkouts.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum


class DeliveryMethod(Enum):
    HOME = "home"
    LOCKER = "locker"


@dataclass(frozen=True)
class FeeRule:
    """Flat fee charged below ``threshold``; free at or above it."""

    fee: int
    threshold: int


FeeTable = Mapping[DeliveryMethod, FeeRule]

# Safe defaults used when the shipping rule store is empty or unreachable.
FALLBACK_FEE_TABLE: dict[DeliveryMethod, FeeRule] = {
    DeliveryMethod.HOME: FeeRule(fee=50, threshold=300),
    DeliveryMethod.LOCKER: FeeRule(fee=40, threshold=300),
}


def shipping_fee(subtotal: int, delivery_method: DeliveryMethod | str, config_table: FeeTable) -> int:
    """Return the delivery fee for a cart ``subtotal`` shipped via ``delivery_method``."""
    method = DeliveryMethod(delivery_method)
    rule = config_table.get(method) or FALLBACK_FEE_TABLE[method]
    if subtotal >= rule.threshold:
        return 0
    return rule.fee
