import json

import pytest
from notifications.channel import set_sms_channel
from notifications.channel.fake_sms import FakeSMSAdapter
from ordering.carrier import set_carrier
from ordering.carrier.fake_adapter import FakeCarrier
from ordering.catalog import set_catalog
from ordering.catalog.memory_adapter import InMemoryCatalog
from ordering.pricing.engine import BulkDiscount, BulkDiscountType, Product
from protean import current_domain
from protean.integrations.pytest import DomainFixture

CATALOG_PRODUCTS = [
    Product(id="wagyu", name="A5 和牛肉眼", base_price=100, weight_kg=0.5),
    Product(
        id="salmon",
        name="挪威三文魚",
        base_price=80,
        discount_price=60,
        bulk_discount=BulkDiscount(threshold=3, type=BulkDiscountType.PERCENT, value=20),
        weight_kg=1.0,
    ),
    Product(
        id="dumplings",
        name="手工水餃",
        base_price=50,
        bulk_discount=BulkDiscount(threshold=10, type=BulkDiscountType.FIXED, value=40),
    ),
    Product(id="icecream", name="雪糕", base_price=30, tier_excluded=True, weight_kg=0.3),
]

HOME_DELIVERY = {
    "delivery_method": "home",
    "delivery_address": "宏開道8號",
    "delivery_district": "九龍灣",
    "delivery_floor": "12",
    "delivery_flat": "B",
}


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture()
def catalog():
    catalog = InMemoryCatalog(list(CATALOG_PRODUCTS))
    set_catalog(catalog)
    return catalog


@pytest.fixture()
def carrier():
    fake = FakeCarrier()
    set_carrier(fake)
    return fake


@pytest.fixture()
def sms():
    fake = FakeSMSAdapter()
    set_sms_channel(fake)
    return fake


def _place_order(lines=None, phone="85291234567", tier="guest", **overrides):
    """Submit a checkout through the command path and return the order id."""
    from ordering.order.creation import PlaceOrder

    fields = {
        "customer_name": "陳大文",
        "customer_phone": phone,
        "tier": tier,
        "items": json.dumps(lines or [{"product_id": "wagyu", "quantity": 2}]),
        **HOME_DELIVERY,
    }
    fields.update(overrides)
    return current_domain.process(PlaceOrder(**fields), asynchronous=False)


def _advance_to_processing(order_id, reference="pi_test_001"):
    from ordering.order.administration import StartProcessing
    from ordering.order.payment import AttachPaymentIntent, ConfirmPayment

    current_domain.process(AttachPaymentIntent(order_id=order_id, payment_reference_id=reference), asynchronous=False)
    current_domain.process(ConfirmPayment(order_id=order_id, payment_reference_id=reference), asynchronous=False)
    current_domain.process(StartProcessing(order_id=order_id), asynchronous=False)
    return order_id


@pytest.fixture()
def place_order(catalog):
    return _place_order


@pytest.fixture()
def advance_to_processing():
    return _advance_to_processing


@pytest.fixture()
def processing_order(place_order, advance_to_processing, carrier, sms):
    """A home-delivery order in PROCESSING, ready for courier dispatch."""
    return advance_to_processing(place_order())
