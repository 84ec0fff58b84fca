import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.routes import admin_router, carrier_router, order_router, payment_router
from protean.integrations.fastapi import register_exception_handlers

CHECKOUT = {
    "customer_name": "陳大文",
    "customer_phone": "85291234567",
    "delivery_method": "home",
    "items": [{"product_id": "wagyu", "quantity": 2}],
    "delivery_address": "宏開道8號",
    "delivery_district": "九龍灣",
    "delivery_floor": "12",
    "delivery_flat": "B",
}


@pytest.fixture()
def client(catalog, carrier, sms):
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(order_router)
    app.include_router(payment_router)
    app.include_router(admin_router)
    app.include_router(carrier_router)
    return TestClient(app)


@pytest.fixture()
def checkout_body():
    return dict(CHECKOUT)


@pytest.fixture()
def checkout(client):
    """Submit a checkout through the API and return the new order id."""

    def _checkout(**overrides) -> str:
        response = client.post("/orders", json={**CHECKOUT, **overrides})
        assert response.status_code == 201, response.text
        return response.json()["order_id"]

    return _checkout


@pytest.fixture()
def pay(client):
    def _pay(order_id, reference="pi_api_001"):
        client.post("/payments/intents", json={"orderId": order_id, "paymentReferenceId": reference})
        response = client.post("/payments/confirm", json={"orderId": order_id, "paymentReferenceId": reference})
        assert response.status_code == 200, response.text

    return _pay


@pytest.fixture()
def processing_order_id(client, checkout, pay):
    order_id = checkout()
    pay(order_id)
    client.post("/admin/orders/cutoff", json={"orderIds": [order_id]})
    return order_id


@pytest.fixture()
def dispatched_order_id(client, processing_order_id):
    response = client.post("/admin/orders/dispatch", json={"orderIds": [processing_order_id]})
    assert response.json()["successCount"] == 1
    return processing_order_id
