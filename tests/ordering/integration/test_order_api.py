"""Integration tests for checkout, order detail, and payment endpoints."""

import json


class TestCheckoutAPI:
    def test_place_order(self, client, checkout_body):
        response = client.post("/orders", json=checkout_body)
        assert response.status_code == 201
        body = response.json()
        assert body["subtotal"] == 200
        assert body["delivery_fee"] == 50
        assert body["total"] == 250
        assert body["status"] == "pending_payment"

    def test_client_prices_are_ignored(self, client, checkout_body):
        checkout_body["items"] = [{"product_id": "wagyu", "quantity": 1, "unit_price": 1}]
        response = client.post("/orders", json=checkout_body)
        assert response.json()["subtotal"] == 100

    def test_empty_cart_rejected(self, client, checkout_body):
        checkout_body["items"] = []
        assert client.post("/orders", json=checkout_body).status_code == 422

    def test_unknown_product_is_a_validation_error(self, client, checkout_body):
        checkout_body["items"] = [{"product_id": "caviar", "quantity": 1}]
        assert client.post("/orders", json=checkout_body).status_code == 400

    def test_locker_without_point_code(self, client, checkout_body):
        checkout_body["delivery_method"] = "locker"
        assert client.post("/orders", json=checkout_body).status_code == 400


class TestOrderDetailAPI:
    def test_snake_case_record(self, client, checkout):
        order_id = checkout()
        record = client.get(f"/orders/{order_id}").json()
        assert record["id"] == order_id
        assert record["status"] == "pending_payment"
        assert record["items_count"] == 2
        assert record["line_items"][0]["qty"] == 2
        assert record["waybill_no"] is None
        assert record["sf_responses"] == []
        assert record["last_carrier_response"] is None

    def test_unknown_order(self, client):
        assert client.get("/orders/no-such-order").status_code == 404

    def test_dispatched_record_carries_carrier_response(self, client, dispatched_order_id):
        record = client.get(f"/orders/{dispatched_order_id}").json()
        assert record["status"] == "ready_for_pickup"
        assert record["tracking_number"] == record["waybill_no"] == "SF0000000001"
        assert record["last_carrier_response"]["success"] is True
        assert "A1000" in record["last_carrier_response"]["raw_body"]

    def test_text_is_stored_verbatim(self, client, carrier, checkout, pay):
        order_id = checkout(customer_name="Tom & Jerry", delivery_address="A<1> & B")
        pay(order_id)
        client.post("/admin/orders/cutoff", json={"orderIds": [order_id]})
        carrier.configure(should_succeed=False, failure_reason="R&D <hub>")
        client.post("/admin/orders/dispatch", json={"orderIds": [order_id]})

        record = client.get(f"/orders/{order_id}").json()
        assert record["customer_name"] == "Tom & Jerry"
        assert record["contact_name"] == "Tom & Jerry"
        assert record["delivery_address"] == "A<1> & B"
        assert record["last_carrier_response"]["message"] == "R&D <hub>"
        assert "R&D <hub>" in record["last_carrier_response"]["raw_body"]

        sent = json.loads(carrier.calls[0]["envelope"]["msgData"])
        contacts = [contact["contact"] for contact in sent["contactInfoList"]]
        assert "Tom & Jerry" in contacts
        assert any("A<1> & B" in contact["address"] for contact in sent["contactInfoList"])


class TestPaymentAPI:
    def test_confirm_payment(self, client, checkout, pay):
        order_id = checkout()
        pay(order_id)
        assert client.get(f"/orders/{order_id}").json()["status"] == "paid"

    def test_reference_mismatch_is_a_conflict(self, client, checkout):
        order_id = checkout()
        client.post("/payments/intents", json={"orderId": order_id, "paymentReferenceId": "pi_1"})
        response = client.post("/payments/confirm", json={"orderId": order_id, "paymentReferenceId": "pi_2"})
        assert response.status_code == 409
        assert response.json()["code"] == "PAYMENT_MISMATCH"

    def test_unknown_order_is_not_found(self, client):
        response = client.post("/payments/confirm", json={"orderId": "missing", "paymentReferenceId": "pi_1"})
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "orderId": "missing",
            "code": "ORDER_NOT_FOUND",
            "error": "Order not found",
        }
