"""Checkout form input — commands and handler.

Each command carries a single field change, mirroring how the storefront
sends one update per keystroke or selection.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.session.session import CheckoutSession, PaymentField, PaymentMethod, ShippingField

_CHECKBOX_VALUES = {"true", "1", "yes", "on"}


def _field_value(field, value):
    # Commands carry strings; checkbox fields arrive as "true"/"false".
    if field in (ShippingField.SAVE_INFO, PaymentField.SAVE_PAYMENT_INFO):
        return str(value).lower() in _CHECKBOX_VALUES
    return value


@checkout.command(part_of="CheckoutSession")
class UpdateShippingInfo:
    session_id = Identifier(required=True)
    field_name = String(required=True, choices=ShippingField)
    field_value = Text()


@checkout.command(part_of="CheckoutSession")
class UpdatePaymentInfo:
    session_id = Identifier(required=True)
    field_name = String(required=True, choices=PaymentField)
    field_value = Text()


@checkout.command(part_of="CheckoutSession")
class SelectPaymentMethod:
    session_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)


@checkout.command(part_of="CheckoutSession")
class SelectShippingOption:
    session_id = Identifier(required=True)
    shipping_option_id = String(required=True, max_length=50)


@checkout.command_handler(part_of=CheckoutSession)
class CheckoutFormsHandler:
    @handle(UpdateShippingInfo)
    def update_shipping_info(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        field = ShippingField(command.field_name)
        session.update_shipping_field(field, _field_value(field, command.field_value))
        repo.add(session)

    @handle(UpdatePaymentInfo)
    def update_payment_info(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        field = PaymentField(command.field_name)
        session.update_payment_field(field, _field_value(field, command.field_value))
        repo.add(session)

    @handle(SelectPaymentMethod)
    def select_payment_method(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.select_payment_method(command.payment_method)
        repo.add(session)

    @handle(SelectShippingOption)
    def select_shipping_option(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.select_shipping_option(command.shipping_option_id)
        repo.add(session)
