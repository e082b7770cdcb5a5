"""CheckoutSession aggregate — the four-stage checkout wizard.

A session owns the shipping and payment forms, the selected shipping tier,
and the current stage. Forward transitions are gated on form completeness;
backward transitions are unguarded and never reset form data.

State Machine:
    SHIPPING → PAYMENT → REVIEW → CONFIRMATION
    PAYMENT → SHIPPING, REVIEW → PAYMENT (retreat)
    REVIEW → CONFIRMATION only through a successful order submission
    CONFIRMATION is terminal
"""

import json
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text, ValueObject

from checkout.catalog.regions import DEFAULT_COUNTRY
from checkout.catalog.shipping import DEFAULT_SHIPPING_OPTION_ID, SHIPPING_OPTIONS, find_shipping_option
from checkout.domain import checkout
from checkout.pricing.summary import TAX_RATE, compute_order_summary
from checkout.session.events import (
    AdvanceBlocked,
    CheckoutStarted,
    OrderPlaced,
    OrderSubmissionFailed,
    OrderSubmissionStarted,
    PaymentMethodSelected,
    ShippingOptionSelected,
    StageAdvanced,
    StageRetreated,
)
from checkout.session.masks import (
    CARD_NUMBER_MAX_LENGTH,
    EXPIRY_DATE_MAX_LENGTH,
    format_card_number,
    format_expiry_date,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class CheckoutStage(Enum):
    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"
    CONFIRMATION = "confirmation"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit-card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank-transfer"


class SubmissionStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FulfillmentStatus(Enum):
    RECEIVED = "received"
    PROCESSING = "processing"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"


class ShippingField(Enum):
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"
    ADDRESS_COMPLEMENT = "address_complement"
    CITY = "city"
    STATE = "state"
    ZIP_CODE = "zip_code"
    COUNTRY = "country"
    SAVE_INFO = "save_info"


class PaymentField(Enum):
    CARDHOLDER_NAME = "cardholder_name"
    CARD_NUMBER = "card_number"
    EXPIRY_DATE = "expiry_date"
    CVV = "cvv"
    SAVE_PAYMENT_INFO = "save_payment_info"


_STAGE_ORDER = [
    CheckoutStage.SHIPPING,
    CheckoutStage.PAYMENT,
    CheckoutStage.REVIEW,
    CheckoutStage.CONFIRMATION,
]

# Guarded forward moves. REVIEW → CONFIRMATION goes through submission.
_FORWARD_TRANSITIONS = {
    CheckoutStage.SHIPPING: CheckoutStage.PAYMENT,
    CheckoutStage.PAYMENT: CheckoutStage.REVIEW,
}

_BACKWARD_TRANSITIONS = {
    CheckoutStage.PAYMENT: CheckoutStage.SHIPPING,
    CheckoutStage.REVIEW: CheckoutStage.PAYMENT,
}

REQUIRED_SHIPPING_FIELDS = (
    ShippingField.FIRST_NAME,
    ShippingField.LAST_NAME,
    ShippingField.EMAIL,
    ShippingField.PHONE,
    ShippingField.ADDRESS,
    ShippingField.CITY,
    ShippingField.STATE,
    ShippingField.ZIP_CODE,
)

REQUIRED_CARD_FIELDS = (
    PaymentField.CARDHOLDER_NAME,
    PaymentField.CARD_NUMBER,
    PaymentField.EXPIRY_DATE,
    PaymentField.CVV,
)

_CHECKBOX_FIELDS = {ShippingField.SAVE_INFO, PaymentField.SAVE_PAYMENT_INFO}

_PAYMENT_MASKS = {
    PaymentField.CARD_NUMBER: format_card_number,
    PaymentField.EXPIRY_DATE: format_expiry_date,
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@checkout.value_object(part_of="CheckoutSession")
class ShippingInfo:
    """Delivery contact and address, typed in field by field.

    Nothing here is validated for format or length; completeness is checked only when
    the customer tries to leave the shipping stage.
    """

    first_name = Text()
    last_name = Text()
    email = Text()
    phone = Text()
    address = Text()
    address_complement = Text()
    city = Text()
    state = Text()
    zip_code = Text()
    country = Text(default=DEFAULT_COUNTRY)
    save_info = Boolean(default=True)


@checkout.value_object(part_of="CheckoutSession")
class PaymentInfo:
    """Payment details. Card fields only matter for the credit-card method."""

    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CREDIT_CARD.value)
    cardholder_name = Text()
    card_number = String(max_length=CARD_NUMBER_MAX_LENGTH)
    expiry_date = String(max_length=EXPIRY_DATE_MAX_LENGTH)
    cvv = Text()
    save_payment_info = Boolean(default=False)


def _replace(value_object, cls, **changes):
    return cls(**{**value_object.to_dict(), **changes})


def _coerce_field_value(field, value):
    if field in _CHECKBOX_FIELDS:
        return bool(value)
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@checkout.aggregate
class CheckoutSession:
    cart_id = Identifier(required=True)
    customer_id = Identifier()  # Nullable for guest checkouts
    stage = String(choices=CheckoutStage, default=CheckoutStage.SHIPPING.value)
    shipping = ValueObject(ShippingInfo)
    payment = ValueObject(PaymentInfo)
    shipping_option_id = String(max_length=50, default=DEFAULT_SHIPPING_OPTION_ID)
    submission_status = String(choices=SubmissionStatus, default=SubmissionStatus.IDLE.value)
    failure_reason = Text()
    order_number = String(max_length=50)
    fulfillment_status = String(choices=FulfillmentStatus)
    is_dirty = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()
    placed_at = DateTime()

    @invariant.post
    def confirmation_requires_an_order_number(self):
        if self.stage == CheckoutStage.CONFIRMATION.value and not self.order_number:
            raise ValidationError({"stage": ["A confirmed checkout must carry an order number"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def start(cls, cart_id, customer_id=None, shipping=None):
        """Open a checkout for a cart.

        Args:
            cart_id: The cart being checked out. The session only keeps a
                reference; the cart's lifecycle belongs to its owner.
            customer_id: The registered customer, if any.
            shipping: Optional dict of saved shipping details to prefill.
        """
        now = datetime.now(UTC)
        session = cls(
            cart_id=cart_id,
            customer_id=customer_id,
            stage=CheckoutStage.SHIPPING.value,
            shipping=ShippingInfo(**(shipping or {})),
            payment=PaymentInfo(),
            shipping_option_id=DEFAULT_SHIPPING_OPTION_ID,
            submission_status=SubmissionStatus.IDLE.value,
            created_at=now,
            updated_at=now,
        )
        session.raise_(
            CheckoutStarted(
                session_id=str(session.id),
                cart_id=str(cart_id),
                customer_id=str(customer_id) if customer_id else None,
                started_at=now,
            )
        )
        return session

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _assert_open(self):
        """Form data can change only before the order is placed."""
        if CheckoutStage(self.stage) == CheckoutStage.CONFIRMATION:
            raise ValidationError({"stage": ["Checkout is already complete"]})
        if self.is_submitting():
            raise ValidationError({"submission_status": ["An order submission is in progress"]})

    def is_submitting(self):
        return SubmissionStatus(self.submission_status) == SubmissionStatus.PENDING

    def missing_shipping_fields(self):
        """Required shipping fields that are still empty, in form order."""
        return [field.value for field in REQUIRED_SHIPPING_FIELDS if not getattr(self.shipping, field.value)]

    def missing_payment_fields(self):
        """Required payment fields that are still empty.

        Only card payments collect anything on this form, so PayPal and bank
        transfer never have missing fields.
        """
        if PaymentMethod(self.payment.payment_method) != PaymentMethod.CREDIT_CARD:
            return []
        return [field.value for field in REQUIRED_CARD_FIELDS if not getattr(self.payment, field.value)]

    def is_shipping_complete(self):
        return not self.missing_shipping_fields()

    def is_payment_complete(self):
        return not self.missing_payment_fields()

    def missing_fields(self):
        """Missing fields that currently keep the session from advancing."""
        current = CheckoutStage(self.stage)
        if current == CheckoutStage.SHIPPING:
            return self.missing_shipping_fields()
        if current == CheckoutStage.PAYMENT:
            return self.missing_payment_fields()
        return []

    def can_advance(self):
        current = CheckoutStage(self.stage)
        if current == CheckoutStage.CONFIRMATION or self.is_submitting():
            return False
        return not self.missing_fields()

    # -------------------------------------------------------------------
    # Form input
    # -------------------------------------------------------------------
    def update_shipping_field(self, field, value):
        """Set one shipping field. ``save_info`` takes a bool, the rest strings."""
        field = ShippingField(field)
        self._assert_open()

        self.shipping = _replace(self.shipping, ShippingInfo, **{field.value: _coerce_field_value(field, value)})
        self.is_dirty = True
        self.updated_at = datetime.now(UTC)

    def update_payment_field(self, field, value):
        """Set one payment field, applying the card number and expiry masks."""
        field = PaymentField(field)
        self._assert_open()

        value = _coerce_field_value(field, value)
        mask = _PAYMENT_MASKS.get(field)
        if mask is not None:
            value = mask(value)

        self.payment = _replace(self.payment, PaymentInfo, **{field.value: value})
        self.is_dirty = True
        self.updated_at = datetime.now(UTC)

    def select_payment_method(self, method):
        """Switch payment method. Card details already typed are kept."""
        method = PaymentMethod(method)
        self._assert_open()

        self.payment = _replace(self.payment, PaymentInfo, payment_method=method.value)
        self.is_dirty = True
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentMethodSelected(
                session_id=str(self.id),
                payment_method=method.value,
            )
        )

    def select_shipping_option(self, option_id):
        """Choose a delivery tier from the static catalog."""
        self._assert_open()
        if find_shipping_option(option_id) is None:
            raise ValidationError({"shipping_option_id": [f"Unknown shipping option: {option_id}"]})

        self.shipping_option_id = option_id
        self.is_dirty = True
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ShippingOptionSelected(
                session_id=str(self.id),
                shipping_option_id=option_id,
            )
        )

    # -------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------
    def _move_to(self, target, event_cls):
        current = CheckoutStage(self.stage)
        self.stage = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            event_cls(
                session_id=str(self.id),
                from_stage=current.value,
                to_stage=target.value,
            )
        )
        logger.info(
            "Checkout stage changed",
            session_id=str(self.id),
            from_stage=current.value,
            to_stage=target.value,
        )

    def advance(self):
        """Move forward one stage if the current stage's guard passes.

        Leaving review means placing the order, which only order placement can
        do; calling this from review raises ValidationError and leaves the
        session untouched. Confirmation is terminal, and a blocked advance
        leaves the stage untouched.

        Returns:
            The stage the session is in afterwards.
        """
        current = CheckoutStage(self.stage)

        if current == CheckoutStage.CONFIRMATION:
            return current

        if current == CheckoutStage.REVIEW:
            raise ValidationError({"stage": ["Leaving review requires placing the order"]})

        missing = self.missing_fields()
        if missing:
            self.raise_(
                AdvanceBlocked(
                    session_id=str(self.id),
                    stage=current.value,
                    missing_fields=json.dumps(missing),
                )
            )
            logger.warning(
                "Checkout advance blocked by incomplete form",
                session_id=str(self.id),
                stage=current.value,
                missing_fields=missing,
            )
            return current

        target = _FORWARD_TRANSITIONS[current]
        self._move_to(target, StageAdvanced)
        return target

    def retreat(self):
        """Move back one stage. Form data is never reset.

        Returns:
            The stage the session is in afterwards.
        """
        current = CheckoutStage(self.stage)
        if current not in _BACKWARD_TRANSITIONS or self.is_submitting():
            return current

        target = _BACKWARD_TRANSITIONS[current]
        self._move_to(target, StageRetreated)
        return target

    def return_to(self, stage):
        """Jump back to an earlier stage, e.g. to edit shipping from review."""
        target = CheckoutStage(stage)
        current = CheckoutStage(self.stage)

        if current == CheckoutStage.CONFIRMATION:
            raise ValidationError({"stage": ["Checkout is already complete"]})
        if self.is_submitting():
            raise ValidationError({"submission_status": ["An order submission is in progress"]})
        if _STAGE_ORDER.index(target) >= _STAGE_ORDER.index(current):
            raise ValidationError({"stage": [f"Cannot return from {current.value} to {target.value}"]})

        self._move_to(target, StageRetreated)
        return target

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def summary_for(self, cart_items, tax_rate=TAX_RATE):
        """Price the cart lines with this session's shipping selection."""
        return compute_order_summary(cart_items, SHIPPING_OPTIONS, self.shipping_option_id, tax_rate)

    # -------------------------------------------------------------------
    # Order submission
    # -------------------------------------------------------------------
    def begin_submission(self):
        """Mark the order as being placed. Only one submission may be in flight."""
        if CheckoutStage(self.stage) != CheckoutStage.REVIEW:
            raise ValidationError({"stage": ["Orders can only be placed from the review stage"]})
        if self.is_submitting():
            raise ValidationError({"submission_status": ["An order submission is already in progress"]})

        now = datetime.now(UTC)
        self.submission_status = SubmissionStatus.PENDING.value
        self.failure_reason = None
        self.updated_at = now

        self.raise_(
            OrderSubmissionStarted(
                session_id=str(self.id),
                payment_method=self.payment.payment_method,
                shipping_option_id=self.shipping_option_id,
                started_at=now,
            )
        )

    def record_submission_success(self, order_number, grand_total):
        """The order was accepted, so the checkout is complete."""
        if not self.is_submitting():
            raise ValidationError({"submission_status": ["No order submission is in progress"]})

        now = datetime.now(UTC)
        self.order_number = order_number
        self.fulfillment_status = FulfillmentStatus.RECEIVED.value
        self.submission_status = SubmissionStatus.SUCCEEDED.value
        self.placed_at = now
        self.updated_at = now
        self.is_dirty = False
        self.stage = CheckoutStage.CONFIRMATION.value

        self.raise_(
            OrderPlaced(
                session_id=str(self.id),
                cart_id=str(self.cart_id),
                order_number=order_number,
                grand_total=grand_total,
                fulfillment_status=FulfillmentStatus.RECEIVED.value,
                save_shipping_info=bool(self.shipping.save_info),
                save_payment_info=bool(self.payment.save_payment_info),
                placed_at=now,
            )
        )

    def record_submission_failure(self, reason):
        """The order was not placed. The session stays in review for a retry."""
        if not self.is_submitting():
            raise ValidationError({"submission_status": ["No order submission is in progress"]})

        now = datetime.now(UTC)
        self.submission_status = SubmissionStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now

        self.raise_(
            OrderSubmissionFailed(
                session_id=str(self.id),
                reason=reason,
                failed_at=now,
            )
        )
