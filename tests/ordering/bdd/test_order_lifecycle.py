"""BDD tests for the order lifecycle."""

from ordering.dispatch.courier import dispatch_to_courier
from ordering.dispatch.cutoff import cutoff
from ordering.order.administration import RecoverOrder
from ordering.order.payment import confirm_payment
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_lifecycle.feature")


@given("a dispatched order that the carrier rejected", target_fixture="order_id")
def _(processing_order, carrier):
    carrier.configure(should_succeed=False, failure_reason="Address not serviceable")
    dispatch_to_courier([processing_order])
    return processing_order


@when(parsers.cfparse('payment is confirmed with reference "{reference}"'))
def _(order_id, reference, scenario_state):
    scenario_state["result"] = confirm_payment(order_id, reference)


@when("the admin runs the cutoff")
def _(order_id):
    cutoff([order_id])


@when("the admin recovers the order")
def _(order_id):
    current_domain.process(RecoverOrder(order_id=order_id, note="Address confirmed by phone"), asynchronous=False)


@when("the carrier accepts orders again")
def _(carrier):
    carrier.configure(should_succeed=True)


@then(parsers.cfparse('the payment is rejected with code "{code}"'))
def _(scenario_state, code):
    result = scenario_state["result"]
    assert result.success is False
    assert result.error_code == code
