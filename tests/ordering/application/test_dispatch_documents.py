"""Application tests for pick lists and invoices over an order selection."""

from ordering.dispatch.documents import PickListLine, aggregate_pick_list, individual_invoices


class TestPickList:
    def test_aggregates_quantities_across_orders(self, place_order):
        first = place_order(lines=[{"product_id": "wagyu", "quantity": 2}, {"product_id": "salmon", "quantity": 1}])
        second = place_order(lines=[{"product_id": "salmon", "quantity": 3}, {"product_id": "icecream", "quantity": 2}])

        lines = aggregate_pick_list([first, second])

        assert lines == [
            PickListLine(product_id="salmon", name="挪威三文魚", quantity=4),
            PickListLine(product_id="icecream", name="雪糕", quantity=2),
            PickListLine(product_id="wagyu", name="A5 和牛肉眼", quantity=2),
        ]

    def test_repeated_ids_counted_once(self, place_order):
        order_id = place_order()
        lines = aggregate_pick_list([order_id, order_id])
        assert lines[0].quantity == 2

    def test_unknown_ids_are_ignored(self, place_order):
        order_id = place_order()
        lines = aggregate_pick_list([order_id, "missing-order"])
        assert [line.to_dict() for line in lines] == [{"productId": "wagyu", "name": "A5 和牛肉眼", "quantity": 2}]

    def test_empty_selection(self):
        assert aggregate_pick_list([]) == []


class TestInvoices:
    def test_one_invoice_per_order_in_selection_order(self, place_order):
        first = place_order()
        second = place_order(lines=[{"product_id": "salmon", "quantity": 3}], phone="85255556666")

        invoices = individual_invoices([second, first])

        assert [invoice["orderId"] for invoice in invoices] == [second, first]
        invoice = invoices[0]
        assert invoice["customerPhone"] == "85255556666"
        assert invoice["lines"] == [
            {"productId": "salmon", "name": "挪威三文魚", "unitPrice": 48, "quantity": 3, "lineTotal": 144}
        ]
        assert invoice["subtotal"] == 144
        assert invoice["deliveryFee"] == 50
        assert invoice["total"] == 194
        assert invoice["status"] == "pending_payment"
