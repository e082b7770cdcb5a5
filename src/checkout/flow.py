"""Checkout flow — drives one customer's checkout session in process.

The flow is what a storefront page talks to. It wraps a CheckoutSession,
holds the cart it was given at construction (it never creates or owns a
cart), places the order through an injectable submitter, and asks the
navigator to leave the checkout when there is nothing left to check out.
"""

from protean.exceptions import ValidationError

from checkout.navigation import CART_PAGE, HOME_PAGE, ORDERS_PAGE, RecordingNavigator
from checkout.pricing.summary import TAX_RATE
from checkout.session.session import CheckoutSession, CheckoutStage, FulfillmentStatus
from checkout.submission import get_submitter
from checkout.submission.placement import SUBMISSION_TIMEOUT_SECONDS, place_order

_TIMELINE = [
    FulfillmentStatus.RECEIVED,
    FulfillmentStatus.PROCESSING,
    FulfillmentStatus.IN_TRANSIT,
    FulfillmentStatus.DELIVERED,
]


class CheckoutFlow:
    """A single-user checkout over an injected cart."""

    def __init__(
        self,
        cart,
        session=None,
        submitter=None,
        navigator=None,
        tax_rate=TAX_RATE,
        timeout=SUBMISSION_TIMEOUT_SECONDS,
    ):
        self.cart = cart
        if session is None:
            session = CheckoutSession.start(cart_id=cart.id, customer_id=cart.customer_id)
        self.session = session
        self.submitter = submitter or get_submitter()
        self.navigator = navigator or RecordingNavigator()
        self.tax_rate = tax_rate
        self.timeout = timeout

    @property
    def stage(self):
        return CheckoutStage(self.session.stage)

    # -------------------------------------------------------------------
    # Form input
    # -------------------------------------------------------------------
    def update_shipping_field(self, field, value):
        self.session.update_shipping_field(field, value)

    def update_payment_field(self, field, value):
        self.session.update_payment_field(field, value)

    def select_payment_method(self, method):
        self.session.select_payment_method(method)

    def select_shipping_option(self, option_id):
        self.session.select_shipping_option(option_id)

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    def is_shipping_complete(self):
        return self.session.is_shipping_complete()

    def is_payment_complete(self):
        return self.session.is_payment_complete()

    def can_advance(self):
        """Whether the advance control should be enabled."""
        return self.session.can_advance()

    def summary(self):
        """Price the cart as it is right now."""
        return self.session.summary_for(self.cart.items, self.tax_rate)

    def confirmation_timeline(self):
        """Read-only fulfillment timeline shown on the confirmation screen."""
        current = self.session.fulfillment_status
        reached = _TIMELINE.index(FulfillmentStatus(current)) if current else -1
        return [{"status": status.value, "reached": index <= reached} for index, status in enumerate(_TIMELINE)]

    # -------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------
    def ensure_cart(self):
        """Send the customer back to the cart if it emptied mid-checkout."""
        if self.stage != CheckoutStage.CONFIRMATION and self.cart.is_empty():
            self.navigator.redirect(CART_PAGE)
            return False
        return True

    async def advance(self, on_submission_started=None):
        """Advance one stage, placing the order when leaving review.

        From review the call returns only once the submission has resolved:
        CONFIRMATION on success, REVIEW on failure or timeout. While another
        submission is pending it returns REVIEW without submitting again.
        ``on_submission_started`` is passed through to ``place_order``.
        """
        if not self.ensure_cart():
            return self.stage

        if self.stage == CheckoutStage.REVIEW:
            if not self.session.is_submitting():
                await place_order(
                    self.session,
                    self.cart,
                    self.submitter,
                    self.timeout,
                    self.tax_rate,
                    on_submission_started=on_submission_started,
                )
            return self.stage

        return self.session.advance()

    def retreat(self):
        return self.session.retreat()

    def return_to(self, stage):
        return self.session.return_to(stage)

    def finish(self, destination=HOME_PAGE):
        """Leave the confirmation screen for the store or the orders page."""
        if self.stage != CheckoutStage.CONFIRMATION:
            raise ValidationError({"stage": ["Checkout is not complete yet"]})
        if destination not in (HOME_PAGE, ORDERS_PAGE):
            raise ValidationError({"destination": [f"Unknown destination: {destination}"]})
        self.navigator.redirect(destination)
