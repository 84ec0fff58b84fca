"""Shared BDD fixtures and step definitions for the Ordering domain."""

import json

import pytest
from ordering.dispatch.courier import dispatch_to_courier
from ordering.order.order import Order
from ordering.order.payment import AttachPaymentIntent
from ordering.order.tracking import ProcessRoutePush
from protean import current_domain
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def scenario_state():
    """Mutable state shared between the steps of one scenario."""
    return {"order_ids": [], "result": None}


def load_order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a home delivery order for {quantity:d} "{product_id}"'), target_fixture="order_id")
def _(place_order, carrier, sms, quantity, product_id):
    return place_order(lines=[{"product_id": product_id, "quantity": quantity}])


@given(parsers.cfparse('payment intent "{reference}" is attached'))
def _(order_id, reference):
    current_domain.process(AttachPaymentIntent(order_id=order_id, payment_reference_id=reference), asynchronous=False)


@given("a dispatched order", target_fixture="order_id")
def _(processing_order):
    dispatch_to_courier([processing_order])
    return processing_order


@given(parsers.cfparse("{count:d} processing orders"))
def _(place_order, advance_to_processing, carrier, sms, scenario_state, count):
    scenario_state["order_ids"].extend(advance_to_processing(place_order()) for _ in range(count))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the order is dispatched to the courier")
def _(order_id):
    dispatch_to_courier([order_id])


@when(parsers.cfparse('the carrier pushes route code "{op_code}"'))
def _(order_id, op_code):
    waybill_no = load_order(order_id).waybill_no
    msg_data = json.dumps({"mailNo": waybill_no, "routes": [{"opCode": op_code}]})
    current_domain.process(ProcessRoutePush(request_id="bdd", msg_data=msg_data), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert load_order(order_id).status == status


@then(parsers.cfparse('the order has waybill "{waybill_no}"'))
def _(order_id, waybill_no):
    assert load_order(order_id).waybill_no == waybill_no
