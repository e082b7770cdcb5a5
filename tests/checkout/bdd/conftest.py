"""Shared BDD fixtures and step definitions for the checkout wizard."""

import asyncio

import pytest
from checkout.cart.cart import Cart
from checkout.flow import CheckoutFlow
from checkout.navigation import RecordingNavigator
from checkout.session.session import CheckoutStage
from checkout.submission.simulated_adapter import SimulatedSubmitter
from pytest_bdd import given, parsers, then, when

SHIPPING = {
    "first_name": "Ana",
    "last_name": "Souza",
    "email": "ana@example.com",
    "phone": "+55 11 91234-5678",
    "address": "Av. Paulista, 1000",
    "city": "São Paulo",
    "state": "SP",
    "zip_code": "01310-100",
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def submitter():
    return SimulatedSubmitter(delay=0)


@pytest.fixture()
def navigator():
    return RecordingNavigator()


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse(
        'a cart with {first_qty:d} copies of "{first_title}" at {first_price:f} '
        'and {second_qty:d} copy of "{second_title}" at {second_price:f}'
    ),
    target_fixture="cart",
)
def _(first_qty, first_title, first_price, second_qty, second_title, second_price):
    cart = Cart.create(customer_id="cust-001")
    cart.add_item(product_id="book-001", title=first_title, unit_price=first_price, quantity=first_qty)
    cart.add_item(product_id="book-002", title=second_title, unit_price=second_price, quantity=second_qty)
    return cart


@given("a checkout for the cart", target_fixture="flow")
def _(cart, submitter, navigator):
    return CheckoutFlow(cart, submitter=submitter, navigator=navigator)


@given("the shipping form is complete")
def _(flow):
    for field, value in SHIPPING.items():
        flow.update_shipping_field(field, value)


@given(parsers.cfparse('the shipping form is complete except "{field}"'))
def _(flow, field):
    for name, value in SHIPPING.items():
        if name != field:
            flow.update_shipping_field(name, value)


@given(parsers.cfparse('the order service rejects orders with "{reason}"'))
def _(submitter, reason):
    submitter.configure(should_succeed=False, failure_reason=reason)


# ---------------------------------------------------------------------------
# Shared Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the checkout is at the "{stage}" stage'))
def _(flow, stage):
    assert flow.stage == CheckoutStage(stage)


@then(parsers.cfparse('the missing fields are "{fields}"'))
def _(flow, fields):
    assert flow.session.missing_fields() == [name.strip() for name in fields.split(",")]


# ---------------------------------------------------------------------------
# Shared When steps
# ---------------------------------------------------------------------------
@when("the customer advances")
def _(flow):
    asyncio.run(flow.advance())
