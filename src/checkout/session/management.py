"""Checkout session management — starting a checkout."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from checkout.cart.cart import Cart
from checkout.domain import checkout
from checkout.session.session import CheckoutSession


@checkout.command(part_of="CheckoutSession")
class StartCheckout:
    """Open the checkout wizard for a cart."""

    cart_id = Identifier(required=True)
    customer_id = Identifier()  # Optional for guest checkouts
    saved_shipping = Text()  # JSON: shipping details remembered from a previous order


@checkout.command_handler(part_of=CheckoutSession)
class ManageCheckoutHandler:
    @handle(StartCheckout)
    def start_checkout(self, command):
        cart = current_domain.repository_for(Cart).get(command.cart_id)
        if cart.is_empty():
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})

        saved_shipping = json.loads(command.saved_shipping) if command.saved_shipping else None
        session = CheckoutSession.start(
            cart_id=command.cart_id,
            customer_id=command.customer_id,
            shipping=saved_shipping,
        )
        current_domain.repository_for(CheckoutSession).add(session)
        return str(session.id)
