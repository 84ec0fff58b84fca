"""Warehouse documents for a selection of orders: pick list and invoices."""

from dataclasses import dataclass

from ordering.dispatch.selection import load_orders


@dataclass(frozen=True)
class PickListLine:
    product_id: str
    name: str
    quantity: int

    def to_dict(self) -> dict:
        return {"productId": self.product_id, "name": self.name, "quantity": self.quantity}


def aggregate_pick_list(order_ids: list[str]) -> list[PickListLine]:
    """Total quantities per (product id, name), largest first.

    Ties are broken by product id then name so the list is stable.
    """
    totals: dict[tuple[str, str], int] = {}
    for order in load_orders(order_ids):
        for item in order.items or []:
            key = (item.product_id, item.name)
            totals[key] = totals.get(key, 0) + item.quantity

    lines = [PickListLine(product_id=pid, name=name, quantity=qty) for (pid, name), qty in totals.items()]
    return sorted(lines, key=lambda line: (-line.quantity, line.product_id, line.name))


def individual_invoices(order_ids: list[str]) -> list[dict]:
    """One invoice per selected order, built from the frozen order snapshot."""
    invoices = []
    for order in load_orders(order_ids):
        invoices.append(
            {
                "orderId": str(order.id),
                "orderDate": order.order_date.isoformat() if order.order_date else None,
                "customerName": order.customer_name,
                "customerPhone": order.customer_phone,
                "contactName": order.contact_name,
                "deliveryMethod": order.delivery_method,
                "deliveryAddress": order.delivery_address,
                "deliveryDistrict": order.delivery_district,
                "lockerPointCode": order.locker_point_code,
                "lines": [
                    {
                        "productId": item.product_id,
                        "name": item.name,
                        "unitPrice": item.unit_price,
                        "quantity": item.quantity,
                        "lineTotal": item.line_total,
                    }
                    for item in order.items or []
                ],
                "subtotal": order.subtotal,
                "deliveryFee": order.delivery_fee,
                "total": order.total,
                "status": order.status,
                "waybillNo": order.waybill_no,
            }
        )
    return invoices
