"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Batch and payment endpoints keep the camelCase
keys existing admin tooling already sends.
"""

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class PlaceOrderRequest(BaseModel):
    customer_name: str
    customer_phone: str
    contact_name: str | None = None
    tier: str = "guest"
    delivery_method: str
    items: list[CartLineSchema] = Field(min_length=1)
    delivery_address: str | None = None
    delivery_district: str | None = None
    delivery_floor: str | None = None
    delivery_flat: str | None = None
    locker_point_code: str | None = None
    payment_reference_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "陳大文",
                    "customer_phone": "85291234567",
                    "tier": "member",
                    "delivery_method": "home",
                    "items": [{"product_id": "wagyu-a5", "quantity": 2}],
                    "delivery_address": "九龍灣宏開道8號",
                    "delivery_district": "九龍灣",
                    "delivery_floor": "12",
                    "delivery_flat": "B",
                }
            ]
        }
    }


class PlaceOrderResponse(BaseModel):
    order_id: str
    subtotal: int
    delivery_fee: int
    total: int
    status: str


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------
class AttachPaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId")
    payment_reference_id: str = Field(alias="paymentReferenceId")


class ConfirmPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId")
    payment_reference_id: str | None = Field(default=None, alias="paymentReferenceId")


# ---------------------------------------------------------------------------
# Admin batch actions
# ---------------------------------------------------------------------------
class OrderSelectionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_ids: list[str] = Field(alias="orderIds")


class DispatchRequest(OrderSelectionRequest):
    force: bool = False
    batch_id: str | None = Field(default=None, alias="batchId")


class ReasonRequest(BaseModel):
    reason: str = Field(min_length=1)


class RecoverRequest(BaseModel):
    note: str | None = None


class ShippingRuleRequest(BaseModel):
    fee: int = Field(ge=0)
    threshold: int = Field(ge=0)


class ShippingRuleResponse(BaseModel):
    id: str
    delivery_method: str
    fee: int
    threshold: int


class ConfigureCarrierRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Carrier unavailable"
    fail_order_ids: list[str] = []
    timeout_order_ids: list[str] = []


class CarrierConfigResponse(BaseModel):
    carrier: str
    should_succeed: bool
    failure_reason: str


class StatusResponse(BaseModel):
    status: str = "ok"
