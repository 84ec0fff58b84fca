"""Batch courier dispatch — two phases over the admin's selection.

Phase 1 checks every selected order for address and contact completeness
and splits the selection into valid and problematic orders. If anything is
problematic the batch stops there and hands the split back for confirmation,
unless the caller forces it through.

Phase 2 sends the valid orders to the carrier one at a time, in selection
order. Each order is its own unit of work: a failure degrades that order to
ABNORMAL and the batch moves on. The batch itself never raises.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from ordering.carrier import get_carrier
from ordering.dispatch.selection import load_orders, unique_ids
from ordering.order.courier import DispatchOrderToCourier, MarkDispatchFailed, dispatch_problems
from ordering.utils.logging import bind_batch_context, clear_batch_context

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Problem:
    order_id: str
    reason: str

    def to_dict(self) -> dict:
        return {"id": self.order_id, "reason": self.reason}


@dataclass
class DispatchPreview:
    valid: list[str] = field(default_factory=list)
    problematic: list[Problem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "problematic": [p.to_dict() for p in self.problematic]}


@dataclass(frozen=True)
class DispatchOutcome:
    order_id: str
    success: bool
    waybill_no: str | None = None
    request_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "orderId": self.order_id,
            "success": self.success,
            "waybillNo": self.waybill_no,
            "requestId": self.request_id,
            "error": self.error,
        }


@dataclass
class DispatchReport:
    requires_confirmation: bool = False
    outcomes: list[DispatchOutcome] = field(default_factory=list)
    problematic: list[Problem] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed_ids(self) -> list[str]:
        return [o.order_id for o in self.outcomes if not o.success]

    def to_dict(self) -> dict:
        return {
            "requiresConfirmation": self.requires_confirmation,
            "successCount": self.success_count,
            "failureCount": len(self.failed_ids),
            "failedIds": self.failed_ids,
            "problematic": [p.to_dict() for p in self.problematic],
            "results": [o.to_dict() for o in self.outcomes],
        }


def preview_dispatch(order_ids: list[str]) -> DispatchPreview:
    """Phase 1: split the selection into dispatchable and problematic orders."""
    settings = get_carrier().settings
    preview = DispatchPreview()
    orders = {str(order.id): order for order in load_orders(order_ids)}

    for order_id in unique_ids(order_ids):
        order = orders.get(order_id)
        if order is None:
            preview.problematic.append(Problem(order_id, "Order not found"))
            continue
        try:
            problems = dispatch_problems(order, settings)
        except Exception as e:
            logger.error("Dispatch validation failed", order_id=order_id, error=str(e))
            problems = [f"Validation error: {e}"]
        if problems:
            preview.problematic.append(Problem(order_id, "; ".join(problems)))
        else:
            preview.valid.append(order_id)
    return preview


def dispatch_one(order_id: str) -> DispatchOutcome:
    """Send one order to the carrier as its own unit of work. Never raises."""
    try:
        result = current_domain.process(DispatchOrderToCourier(order_id=order_id), asynchronous=False)
    except Exception as e:
        logger.error("Dispatch unit of work failed", order_id=order_id, error=str(e))
        reason = f"Dispatch error: {e}"
        try:
            current_domain.process(MarkDispatchFailed(order_id=order_id, reason=reason), asynchronous=False)
        except Exception as mark_error:
            logger.error("Could not mark order abnormal", order_id=order_id, error=str(mark_error))
        return DispatchOutcome(order_id=order_id, success=False, error=reason)

    outcome = DispatchOutcome(
        order_id=order_id,
        success=bool(result["success"]),
        waybill_no=result.get("waybill_no"),
        request_id=result.get("request_id"),
        error=result.get("error"),
    )
    if outcome.success:
        logger.info("Order dispatched", order_id=order_id, waybill_no=outcome.waybill_no)
    else:
        logger.warning("Order dispatch failed", order_id=order_id, error=outcome.error)
    return outcome


def iter_dispatch(order_ids: list[str]) -> Iterator[DispatchOutcome]:
    """Phase 2: dispatch each order strictly in sequence, yielding as each finishes."""
    for order_id in unique_ids(order_ids):
        yield dispatch_one(order_id)


def dispatch_to_courier(order_ids: list[str], force: bool = False, batch_id: str | None = None) -> DispatchReport:
    """Run both phases and report per-order outcomes.

    With problematic orders and no ``force``, nothing is sent and the report
    asks for confirmation. With ``force``, only the valid orders are sent.
    """
    if batch_id:
        bind_batch_context(batch_id=batch_id)
    try:
        preview = preview_dispatch(order_ids)
        report = DispatchReport(problematic=preview.problematic)
        if preview.problematic and not force:
            report.requires_confirmation = True
            logger.info(
                "Dispatch awaiting confirmation",
                valid=len(preview.valid),
                problematic=len(preview.problematic),
            )
            return report

        report.outcomes.extend(iter_dispatch(preview.valid))
        logger.info(
            "Dispatch batch complete",
            success=report.success_count,
            failed=len(report.failed_ids),
            skipped=len(preview.problematic),
        )
        return report
    finally:
        if batch_id:
            clear_batch_context()
