"""Pydantic request/response schemas for the Checkout API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingSchema(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    address_complement: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    save_info: bool | None = None


class PaymentSchema(BaseModel):
    """Payment details as shown back to the customer. The CVV is never echoed."""

    payment_method: str
    cardholder_name: str | None = None
    card_number: str | None = None  # masked to the last four digits
    expiry_date: str | None = None
    save_payment_info: bool | None = None


class ShippingOptionSchema(BaseModel):
    id: str
    name: str
    price: float
    description: str


class OrderSummarySchema(BaseModel):
    subtotal: float
    shipping_cost: float
    tax: float
    grand_total: float
    display_grand_total: str
    shipping_option: ShippingOptionSchema | None = None


class TimelineEntrySchema(BaseModel):
    status: str
    reached: bool


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    customer_id: str | None = None


class AddToCartRequest(BaseModel):
    product_id: str
    title: str
    author: str | None = None
    unit_price: float = Field(ge=0)
    cover_image: str | None = None
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "book-001",
                    "title": "Dom Casmurro",
                    "author": "Machado de Assis",
                    "unit_price": 39.9,
                    "quantity": 1,
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    new_quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class StartCheckoutRequest(BaseModel):
    cart_id: str
    customer_id: str | None = None
    saved_shipping: ShippingSchema | None = None


class UpdateFieldRequest(BaseModel):
    field: str
    value: str | bool | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"field": "zip_code", "value": "01310-100"},
                {"field": "save_info", "value": False},
            ]
        }
    }


class SelectPaymentMethodRequest(BaseModel):
    payment_method: str


class SelectShippingOptionRequest(BaseModel):
    shipping_option_id: str


class ReturnToStageRequest(BaseModel):
    stage: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class CartIdResponse(BaseModel):
    cart_id: str


class SessionIdResponse(BaseModel):
    session_id: str


class StageResponse(BaseModel):
    stage: str


class AdvanceResponse(BaseModel):
    stage: str
    submission_status: str
    order_number: str | None = None
    failure_reason: str | None = None


class CheckoutResponse(BaseModel):
    session_id: str
    cart_id: str
    stage: str
    shipping: ShippingSchema
    payment: PaymentSchema
    shipping_option_id: str
    submission_status: str
    failure_reason: str | None = None
    order_number: str | None = None
    fulfillment_status: str | None = None
    is_shipping_complete: bool
    is_payment_complete: bool
    can_advance: bool
    missing_fields: list[str] = []
    summary: OrderSummarySchema
    timeline: list[TimelineEntrySchema] = []
    redirect_to: str | None = None


class AddressOptionsResponse(BaseModel):
    states: list[str]
    countries: dict[str, str]
