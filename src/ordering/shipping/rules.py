"""Shipping rules store — operator-editable fee table per delivery method.

Each ShippingRule record holds the fee and free-shipping threshold for one
delivery method. load_fee_table() returns a snapshot for the calculator and
degrades to the fallback table when the store cannot be read.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.shipping.fees import FALLBACK_FEE_TABLE, DeliveryMethod, FeeRule

logger = structlog.get_logger(__name__)


@ordering.aggregate
class ShippingRule:
    delivery_method = String(required=True, choices=DeliveryMethod)
    fee = Integer(required=True, min_value=0)
    threshold = Integer(required=True, min_value=0)
    updated_at = DateTime()

    def to_fee_rule(self) -> FeeRule:
        return FeeRule(fee=self.fee, threshold=self.threshold)


@ordering.command(part_of="ShippingRule")
class UpsertShippingRule:
    delivery_method = String(required=True, choices=DeliveryMethod)
    fee = Integer(required=True, min_value=0)
    threshold = Integer(required=True, min_value=0)


@ordering.command_handler(part_of=ShippingRule)
class ShippingRuleHandler:
    @handle(UpsertShippingRule)
    def upsert_rule(self, command):
        repo = current_domain.repository_for(ShippingRule)
        existing = repo._dao.query.filter(delivery_method=command.delivery_method).all().items
        now = datetime.now(UTC)
        if existing:
            rule = existing[0]
            rule.fee = command.fee
            rule.threshold = command.threshold
            rule.updated_at = now
        else:
            rule = ShippingRule(
                delivery_method=command.delivery_method,
                fee=command.fee,
                threshold=command.threshold,
                updated_at=now,
            )
        repo.add(rule)
        logger.info(
            "Shipping rule updated",
            delivery_method=command.delivery_method,
            fee=command.fee,
            threshold=command.threshold,
        )
        return str(rule.id)


def load_fee_table() -> dict[DeliveryMethod, FeeRule]:
    """Snapshot the configured fee table, filling gaps from the fallback table."""
    table = dict(FALLBACK_FEE_TABLE)
    try:
        rules = current_domain.repository_for(ShippingRule)._dao.query.all().items
    except Exception as exc:
        logger.warning("Shipping rule store unavailable, using fallback fee table", error=str(exc))
        return table

    for rule in rules:
        table[DeliveryMethod(rule.delivery_method)] = rule.to_fee_rule()
    return table
