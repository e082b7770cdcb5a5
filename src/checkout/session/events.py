"""Domain events for the CheckoutSession aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from checkout.domain import checkout


@checkout.event(part_of="CheckoutSession")
class CheckoutStarted:
    """A customer opened the checkout wizard for a cart."""

    __version__ = "v1"

    session_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    customer_id = Identifier()
    started_at = DateTime(required=True)


@checkout.event(part_of="CheckoutSession")
class StageAdvanced:
    """The wizard moved forward one stage after its guard passed."""

    __version__ = "v1"

    session_id = Identifier(required=True)
    from_stage = String(required=True)
    to_stage = String(required=True)


@checkout.event(part_of="CheckoutSession")
class StageRetreated:
    """The wizard moved back to an earlier stage. Form data is kept."""

    __version__ = "v1"

    session_id = Identifier(required=True)
    from_stage = String(required=True)
    to_stage = String(required=True)


@checkout.event(part_of="CheckoutSession")
class AdvanceBlocked:
    """An advance was attempted while required fields were still empty."""

    __version__ = "v1"

    session_id = Identifier(required=True)
    stage = String(required=True)
    missing_fields = Text(required=True)  # JSON: list of field names


@checkout.event(part_of="CheckoutSession")
class ShippingOptionSelected:
    __version__ = "v1"

    session_id = Identifier(required=True)
    shipping_option_id = String(required=True)


@checkout.event(part_of="CheckoutSession")
class PaymentMethodSelected:
    __version__ = "v1"

    session_id = Identifier(required=True)
    payment_method = String(required=True)


@checkout.event(part_of="CheckoutSession")
class OrderSubmissionStarted:
    """The review stage was confirmed and the order is being placed."""

    __version__ = "v1"

    session_id = Identifier(required=True)
    payment_method = String(required=True)
    shipping_option_id = String(required=True)
    started_at = DateTime(required=True)


@checkout.event(part_of="CheckoutSession")
class OrderPlaced:
    """The order was accepted. The checkout is complete.

    The save flags tell profile collaborators whether the customer asked for
    their shipping or payment details to be remembered.
    """

    __version__ = "v1"

    session_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    order_number = String(required=True)
    grand_total = Float(required=True)
    fulfillment_status = String(required=True)
    save_shipping_info = Boolean(default=False)
    save_payment_info = Boolean(default=False)
    placed_at = DateTime(required=True)


@checkout.event(part_of="CheckoutSession")
class OrderSubmissionFailed:
    """Placing the order failed. The session stays in review for a retry."""

    __version__ = "v1"

    session_id = Identifier(required=True)
    reason = Text(required=True)
    failed_at = DateTime(required=True)
