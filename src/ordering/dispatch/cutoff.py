"""Cutoff — move the selected PAID orders into PROCESSING.

Orders in any other status are left out of the batch quietly; they are not
failures.
"""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from ordering.dispatch.selection import load_orders
from ordering.order.administration import StartProcessing
from ordering.order.order import OrderStatus

logger = structlog.get_logger(__name__)


@dataclass
class CutoffReport:
    processed_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)

    @property
    def processed_count(self) -> int:
        return len(self.processed_ids)

    def to_dict(self) -> dict:
        return {
            "processedCount": self.processed_count,
            "processedIds": self.processed_ids,
            "failedIds": self.failed_ids,
        }


def cutoff(order_ids: list[str]) -> CutoffReport:
    report = CutoffReport()
    for order in load_orders(order_ids):
        if OrderStatus(order.status) != OrderStatus.PAID:
            continue
        order_id = str(order.id)
        try:
            current_domain.process(StartProcessing(order_id=order_id), asynchronous=False)
        except Exception as e:
            logger.error("Cutoff failed for order", order_id=order_id, error=str(e))
            report.failed_ids.append(order_id)
            continue
        report.processed_ids.append(order_id)

    logger.info("Cutoff complete", processed=report.processed_count, failed=len(report.failed_ids))
    return report
