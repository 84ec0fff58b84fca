"""Carrier route push parsing and route code → order status mapping."""

import json
from dataclasses import dataclass, field

from ordering.order.order import OrderStatus

# Collected, departed, arrived at hub, out for delivery...
IN_TRANSIT_CODES = frozenset({"50", "51", "30", "31", "36", "44", "45", "46"})
# Signed for by the receiver
DELIVERED_CODES = frozenset({"80"})


class MalformedRoutePush(ValueError):
    """The route push msgData is not a JSON object with a routes array."""


@dataclass(frozen=True)
class RouteEvent:
    op_code: str
    remark: str | None = None
    accept_time: str | None = None
    accept_address: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "RouteEvent":
        return cls(
            op_code=str(data.get("opCode") or "").strip(),
            remark=data.get("remark"),
            accept_time=data.get("acceptTime"),
            accept_address=data.get("acceptAddress"),
        )


@dataclass(frozen=True)
class RoutePush:
    waybill_no: str | None
    routes: list[RouteEvent] = field(default_factory=list)

    @classmethod
    def parse(cls, msg_data: str) -> "RoutePush":
        try:
            data = json.loads(msg_data)
        except ValueError as exc:
            raise MalformedRoutePush(str(exc)) from exc
        if not isinstance(data, dict):
            raise MalformedRoutePush("msgData must be a JSON object")

        waybill_no = str(data.get("mailNo") or "").strip() or None
        raw_routes = data.get("routes") or []
        if not isinstance(raw_routes, list):
            raise MalformedRoutePush("routes must be a JSON array")
        routes = [RouteEvent.from_dict(r) for r in raw_routes if isinstance(r, dict)]
        return cls(waybill_no=waybill_no, routes=routes)


def target_status_for(routes: list[RouteEvent]) -> tuple[OrderStatus, RouteEvent] | None:
    """Scan from the most recent event backwards.

    A delivered code wins outright; otherwise the most recent in-transit code
    sets SHIPPING. Returns None when no code is actionable. The carrier sends
    events oldest first.
    """
    shipping: RouteEvent | None = None
    for event in reversed(routes):
        if event.op_code in DELIVERED_CODES:
            return OrderStatus.COMPLETED, event
        if event.op_code in IN_TRANSIT_CODES and shipping is None:
            shipping = event
    if shipping is not None:
        return OrderStatus.SHIPPING, shipping
    return None
