"""Tests for CheckoutSession creation and form input."""

import pytest
from checkout.session.events import CheckoutStarted, PaymentMethodSelected, ShippingOptionSelected
from checkout.session.session import (
    CheckoutSession,
    CheckoutStage,
    PaymentField,
    PaymentMethod,
    ShippingField,
    SubmissionStatus,
)
from protean.exceptions import ValidationError


class TestSessionCreation:
    def test_starts_at_shipping(self):
        session = CheckoutSession.start(cart_id="cart-001")
        assert session.stage == CheckoutStage.SHIPPING.value

    def test_defaults(self):
        session = CheckoutSession.start(cart_id="cart-001")

        assert session.shipping.country == "BR"
        assert session.shipping.save_info is True
        assert session.payment.payment_method == PaymentMethod.CREDIT_CARD.value
        assert session.payment.save_payment_info is False
        assert session.shipping_option_id == "standard"
        assert session.submission_status == SubmissionStatus.IDLE.value
        assert session.is_dirty is False
        assert session.order_number is None

    def test_keeps_cart_reference(self):
        session = CheckoutSession.start(cart_id="cart-001", customer_id="cust-001")
        assert str(session.cart_id) == "cart-001"
        assert str(session.customer_id) == "cust-001"

    def test_prefills_saved_shipping(self, complete_shipping):
        session = CheckoutSession.start(cart_id="cart-001", shipping=complete_shipping)

        assert session.shipping.first_name == "Ana"
        assert session.is_shipping_complete() is True
        assert session.is_dirty is False

    def test_raises_checkout_started(self):
        session = CheckoutSession.start(cart_id="cart-001", customer_id="cust-001")

        event = session._events[-1]
        assert isinstance(event, CheckoutStarted)
        assert event.cart_id == "cart-001"
        assert event.customer_id == "cust-001"

    def test_cart_id_is_required(self):
        with pytest.raises(ValidationError):
            CheckoutSession(stage=CheckoutStage.SHIPPING.value)


class TestShippingInput:
    def test_updates_one_field(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_shipping_field(ShippingField.CITY, "Recife")

        assert session.shipping.city == "Recife"
        assert session.shipping.country == "BR"

    def test_accepts_field_name(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_shipping_field("zip_code", "50000-000")
        assert session.shipping.zip_code == "50000-000"

    def test_marks_session_dirty(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_shipping_field(ShippingField.FIRST_NAME, "Ana")
        assert session.is_dirty is True

    def test_save_info_checkbox(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_shipping_field(ShippingField.SAVE_INFO, False)
        assert session.shipping.save_info is False

    def test_long_values_are_stored_unchanged(self):
        session = CheckoutSession.start(cart_id="cart-001")
        address = "Rua " + "Longa " * 60
        session.update_shipping_field(ShippingField.ADDRESS, address)

        assert len(address) > 300
        assert session.shipping.address == address

    def test_unknown_field_is_rejected(self):
        session = CheckoutSession.start(cart_id="cart-001")
        with pytest.raises(ValueError):
            session.update_shipping_field("nickname", "Aninha")


class TestPaymentInput:
    def test_card_number_is_masked(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_payment_field(PaymentField.CARD_NUMBER, "4242424242424242")
        assert session.payment.card_number == "4242 4242 4242 4242"

    def test_expiry_is_masked(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_payment_field(PaymentField.EXPIRY_DATE, "1228")
        assert session.payment.expiry_date == "12/28"

    def test_cvv_is_stored_as_typed(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_payment_field(PaymentField.CVV, "123")
        assert session.payment.cvv == "123"

    def test_free_text_fields_have_no_length_limit(self):
        session = CheckoutSession.start(cart_id="cart-001")
        name = "ANA " * 80
        session.update_payment_field(PaymentField.CARDHOLDER_NAME, name)
        session.update_payment_field(PaymentField.CVV, "1" * 300)

        assert session.payment.cardholder_name == name
        assert session.payment.cvv == "1" * 300

    def test_save_payment_info_checkbox(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.update_payment_field(PaymentField.SAVE_PAYMENT_INFO, True)
        assert session.payment.save_payment_info is True

    def test_select_payment_method(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.select_payment_method(PaymentMethod.BANK_TRANSFER)

        assert session.payment.payment_method == "bank-transfer"
        event = session._events[-1]
        assert isinstance(event, PaymentMethodSelected)
        assert event.payment_method == "bank-transfer"

    def test_unknown_payment_method_is_rejected(self):
        session = CheckoutSession.start(cart_id="cart-001")
        with pytest.raises(ValueError):
            session.select_payment_method("cash")


class TestShippingOptionSelection:
    def test_select_known_option(self):
        session = CheckoutSession.start(cart_id="cart-001")
        session.select_shipping_option("express")

        assert session.shipping_option_id == "express"
        assert isinstance(session._events[-1], ShippingOptionSelected)

    def test_unknown_option_is_rejected(self):
        session = CheckoutSession.start(cart_id="cart-001")
        with pytest.raises(ValidationError):
            session.select_shipping_option("teleport")
        assert session.shipping_option_id == "standard"

    def test_summary_reflects_selection(self, cart):
        session = CheckoutSession.start(cart_id=str(cart.id))
        assert session.summary_for(cart.items).grand_total == pytest.approx(108.0)

        session.select_shipping_option("express")
        assert session.summary_for(cart.items).grand_total == pytest.approx(123.99)


class TestSubmissionLifecycle:
    def _review_session(self, complete_shipping):
        session = CheckoutSession.start(cart_id="cart-001", shipping=complete_shipping)
        session.select_payment_method(PaymentMethod.PAYPAL)
        session.advance()
        session.advance()
        return session

    def test_begin_submission_only_from_review(self):
        session = CheckoutSession.start(cart_id="cart-001")
        with pytest.raises(ValidationError):
            session.begin_submission()

    def test_only_one_submission_in_flight(self, complete_shipping):
        session = self._review_session(complete_shipping)
        session.begin_submission()

        with pytest.raises(ValidationError):
            session.begin_submission()

    def test_form_input_is_locked_while_submitting(self, complete_shipping):
        session = self._review_session(complete_shipping)
        session.begin_submission()

        with pytest.raises(ValidationError):
            session.update_shipping_field(ShippingField.CITY, "Recife")
        with pytest.raises(ValidationError):
            session.select_shipping_option("express")

    def test_success_confirms_checkout(self, complete_shipping):
        session = self._review_session(complete_shipping)
        session.update_shipping_field(ShippingField.CITY, "Campinas")
        session.begin_submission()
        session.record_submission_success("GBS-654321", 108.0)

        assert session.stage == CheckoutStage.CONFIRMATION.value
        assert session.order_number == "GBS-654321"
        assert session.fulfillment_status == "received"
        assert session.submission_status == SubmissionStatus.SUCCEEDED.value
        assert session.is_dirty is False
        assert session.placed_at is not None

    def test_failure_stays_in_review(self, complete_shipping):
        session = self._review_session(complete_shipping)
        session.begin_submission()
        session.record_submission_failure("Payment declined")

        assert session.stage == CheckoutStage.REVIEW.value
        assert session.submission_status == SubmissionStatus.FAILED.value
        assert session.failure_reason == "Payment declined"
        assert session.order_number is None

    def test_retry_after_failure_clears_reason(self, complete_shipping):
        session = self._review_session(complete_shipping)
        session.begin_submission()
        session.record_submission_failure("Payment declined")
        session.begin_submission()

        assert session.is_submitting() is True
        assert session.failure_reason is None

    def test_outcome_requires_pending_submission(self, complete_shipping):
        session = self._review_session(complete_shipping)
        with pytest.raises(ValidationError):
            session.record_submission_success("GBS-111111", 108.0)
        with pytest.raises(ValidationError):
            session.record_submission_failure("nope")
