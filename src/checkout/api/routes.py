"""FastAPI routes for the Checkout domain — carts, checkout sessions, and catalog."""

import json

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from checkout.api.schemas import (
    AddressOptionsResponse,
    AddToCartRequest,
    AdvanceResponse,
    CartIdResponse,
    CheckoutResponse,
    CreateCartRequest,
    OrderSummarySchema,
    PaymentSchema,
    ReturnToStageRequest,
    SelectPaymentMethodRequest,
    SelectShippingOptionRequest,
    SessionIdResponse,
    ShippingOptionSchema,
    ShippingSchema,
    StageResponse,
    StartCheckoutRequest,
    StatusResponse,
    TimelineEntrySchema,
    UpdateCartQuantityRequest,
    UpdateFieldRequest,
)
from checkout.cart.cart import Cart
from checkout.cart.items import AddToCart, CreateCart, RemoveFromCart, UpdateCartQuantity
from checkout.catalog.regions import COUNTRIES, STATE_CODES
from checkout.catalog.shipping import SHIPPING_OPTIONS
from checkout.flow import CheckoutFlow
from checkout.navigation import RecordingNavigator
from checkout.session.forms import SelectPaymentMethod, SelectShippingOption, UpdatePaymentInfo, UpdateShippingInfo
from checkout.session.management import StartCheckout
from checkout.session.masks import mask_card_number
from checkout.pricing.summary import format_price
from checkout.session.session import CheckoutSession, CheckoutStage, SubmissionStatus
from checkout.session.stages import AdvanceCheckout, RetreatCheckout, ReturnToStage
from checkout.submission import get_submitter


def _load_flow(session_id):
    """Rebuild the in-process flow for a persisted session and its cart."""
    session = current_domain.repository_for(CheckoutSession).get(session_id)
    cart = current_domain.repository_for(Cart).get(session.cart_id)
    return CheckoutFlow(cart, session=session, submitter=get_submitter(), navigator=RecordingNavigator())


def _field_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _submission_in_progress(session):
    return JSONResponse(
        status_code=409,
        content={"stage": session.stage, "submission_status": SubmissionStatus.PENDING.value},
    )


def _shipping_option_schema(option):
    if option is None:
        return None
    return ShippingOptionSchema(id=option.id, name=option.name, price=option.price, description=option.description)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    result = current_domain.process(CreateCart(customer_id=body.customer_id), asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.post("/{cart_id}/items", response_model=StatusResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> StatusResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        title=body.title,
        author=body.author,
        unit_price=body.unit_price,
        cover_image=body.cover_image,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/items/{item_id}", response_model=StatusResponse)
async def update_cart_item_quantity(cart_id: str, item_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    command = UpdateCartQuantity(
        cart_id=cart_id,
        item_id=item_id,
        new_quantity=body.new_quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, item_id: str) -> StatusResponse:
    current_domain.process(RemoveFromCart(cart_id=cart_id, item_id=item_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkouts", tags=["checkouts"])


@checkout_router.post("", status_code=201, response_model=SessionIdResponse)
async def start_checkout(body: StartCheckoutRequest) -> SessionIdResponse:
    saved_shipping = body.saved_shipping.model_dump(exclude_none=True) if body.saved_shipping else None
    command = StartCheckout(
        cart_id=body.cart_id,
        customer_id=body.customer_id,
        saved_shipping=json.dumps(saved_shipping) if saved_shipping else None,
    )
    result = current_domain.process(command, asynchronous=False)
    return SessionIdResponse(session_id=result)


@checkout_router.get("/{session_id}", response_model=CheckoutResponse)
async def get_checkout(session_id: str) -> CheckoutResponse:
    """Current wizard state, with the order priced against the live cart."""
    flow = _load_flow(session_id)
    flow.ensure_cart()

    session = flow.session
    summary = flow.summary()

    return CheckoutResponse(
        session_id=str(session.id),
        cart_id=str(session.cart_id),
        stage=session.stage,
        shipping=ShippingSchema(**session.shipping.to_dict()),
        payment=PaymentSchema(
            payment_method=session.payment.payment_method,
            cardholder_name=session.payment.cardholder_name,
            card_number=mask_card_number(session.payment.card_number),
            expiry_date=session.payment.expiry_date,
            save_payment_info=session.payment.save_payment_info,
        ),
        shipping_option_id=session.shipping_option_id,
        submission_status=session.submission_status,
        failure_reason=session.failure_reason,
        order_number=session.order_number,
        fulfillment_status=session.fulfillment_status,
        is_shipping_complete=flow.is_shipping_complete(),
        is_payment_complete=flow.is_payment_complete(),
        can_advance=flow.can_advance(),
        missing_fields=session.missing_fields(),
        summary=OrderSummarySchema(
            subtotal=summary.subtotal,
            shipping_cost=summary.shipping_cost,
            tax=summary.tax,
            grand_total=summary.grand_total,
            display_grand_total=format_price(summary.grand_total),
            shipping_option=_shipping_option_schema(summary.shipping_option),
        ),
        timeline=[TimelineEntrySchema(**entry) for entry in flow.confirmation_timeline()],
        redirect_to=flow.navigator.last,
    )


@checkout_router.put("/{session_id}/shipping", response_model=StatusResponse)
async def update_shipping(session_id: str, body: UpdateFieldRequest) -> StatusResponse:
    command = UpdateShippingInfo(
        session_id=session_id,
        field_name=body.field,
        field_value=_field_value(body.value),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@checkout_router.put("/{session_id}/payment", response_model=StatusResponse)
async def update_payment(session_id: str, body: UpdateFieldRequest) -> StatusResponse:
    command = UpdatePaymentInfo(
        session_id=session_id,
        field_name=body.field,
        field_value=_field_value(body.value),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@checkout_router.put("/{session_id}/payment-method", response_model=StatusResponse)
async def select_payment_method(session_id: str, body: SelectPaymentMethodRequest) -> StatusResponse:
    command = SelectPaymentMethod(session_id=session_id, payment_method=body.payment_method)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@checkout_router.put("/{session_id}/shipping-option", response_model=StatusResponse)
async def select_shipping_option(session_id: str, body: SelectShippingOptionRequest) -> StatusResponse:
    command = SelectShippingOption(session_id=session_id, shipping_option_id=body.shipping_option_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@checkout_router.post("/{session_id}/advance", response_model=AdvanceResponse)
async def advance_checkout(session_id: str):
    """Advance one stage. From review this places the order.

    A blocked advance answers 409 with the fields that still need filling
    in, an empty cart answers 409 with the page to send the customer to, and
    an order already being placed for the session answers 409 as well.
    """
    flow = _load_flow(session_id)
    previous = flow.stage

    if previous == CheckoutStage.REVIEW:
        if flow.session.is_submitting():
            return _submission_in_progress(flow.session)

        sessions = current_domain.repository_for(CheckoutSession)
        try:
            # The pending state is saved before the submitter is awaited
            await flow.advance(on_submission_started=sessions.add)
        except ExpectedVersionError:
            return _submission_in_progress(flow.session)
        finally:
            if not flow.session.is_submitting():
                sessions.add(flow.session)
        current_domain.repository_for(Cart).add(flow.cart)
    elif flow.ensure_cart():
        current_domain.process(AdvanceCheckout(session_id=session_id), asynchronous=False)
        flow.session = current_domain.repository_for(CheckoutSession).get(session_id)

    session = flow.session
    if flow.navigator.last:
        return JSONResponse(
            status_code=409,
            content={"stage": session.stage, "redirect_to": flow.navigator.last},
        )
    if previous != CheckoutStage.CONFIRMATION and flow.stage == previous and session.missing_fields():
        return JSONResponse(
            status_code=409,
            content={"stage": session.stage, "missing_fields": session.missing_fields()},
        )

    return AdvanceResponse(
        stage=session.stage,
        submission_status=session.submission_status,
        order_number=session.order_number,
        failure_reason=session.failure_reason,
    )


@checkout_router.post("/{session_id}/retreat", response_model=StageResponse)
async def retreat_checkout(session_id: str) -> StageResponse:
    stage = current_domain.process(RetreatCheckout(session_id=session_id), asynchronous=False)
    return StageResponse(stage=stage)


@checkout_router.post("/{session_id}/return", response_model=StageResponse)
async def return_to_stage(session_id: str, body: ReturnToStageRequest) -> StageResponse:
    stage = current_domain.process(ReturnToStage(session_id=session_id, stage=body.stage), asynchronous=False)
    return StageResponse(stage=stage)


# ---------------------------------------------------------------------------
# Catalog Router
# ---------------------------------------------------------------------------
catalog_router = APIRouter(tags=["catalog"])


@catalog_router.get("/shipping-options", response_model=list[ShippingOptionSchema])
async def list_shipping_options() -> list[ShippingOptionSchema]:
    return [_shipping_option_schema(option) for option in SHIPPING_OPTIONS]


@catalog_router.get("/address-options", response_model=AddressOptionsResponse)
async def list_address_options() -> AddressOptionsResponse:
    return AddressOptionsResponse(states=list(STATE_CODES), countries=COUNTRIES)
