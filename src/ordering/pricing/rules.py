"""Pricing rules snapshot — tier discount percentages and exclusions.

Rules are read from the environment once and cached; tests and admin tooling
swap the snapshot with set_pricing_rules().
"""

import os
from dataclasses import dataclass, field

_current_rules: "PricingRules | None" = None


@dataclass(frozen=True)
class PricingRules:
    member_discount_pct: float = 0
    wallet_discount_pct: float = 0
    excluded_product_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_env(cls) -> "PricingRules":
        excluded = os.environ.get("PRICING_EXCLUDED_PRODUCT_IDS", "")
        return cls(
            member_discount_pct=float(os.environ.get("PRICING_MEMBER_DISCOUNT_PCT", "0")),
            wallet_discount_pct=float(os.environ.get("PRICING_WALLET_DISCOUNT_PCT", "0")),
            excluded_product_ids=frozenset(pid.strip() for pid in excluded.split(",") if pid.strip()),
        )


def get_pricing_rules() -> PricingRules:
    """Return the active pricing rules. Defaults to the environment snapshot."""
    global _current_rules
    if _current_rules is None:
        _current_rules = PricingRules.from_env()
    return _current_rules


def set_pricing_rules(rules: PricingRules) -> None:
    global _current_rules
    _current_rules = rules


def reset_pricing_rules() -> None:
    global _current_rules
    _current_rules = None
