"""Order pricing — a pure projection of cart lines, shipping tier and tax.

The summary is recomputed on every evaluation and never stored on the
checkout session, so it always reflects the current cart and the current
shipping selection. Amounts are plain floats; rounding happens only when a
value is formatted for display.
"""

from dataclasses import dataclass

import structlog

from checkout.catalog.shipping import SHIPPING_OPTIONS, ShippingOption, find_shipping_option

logger = structlog.get_logger(__name__)

TAX_RATE = 0.08

_CURRENCY_SYMBOLS = {"BRL": "R$", "USD": "$", "EUR": "€"}


@dataclass(frozen=True)
class OrderSummary:
    """Subtotal, shipping, tax and grand total for a prospective order."""

    subtotal: float
    shipping_cost: float
    tax: float
    grand_total: float
    shipping_option: ShippingOption | None = None


def compute_order_summary(cart_items, catalog=SHIPPING_OPTIONS, selected_shipping_option_id=None, tax_rate=TAX_RATE):
    """Price an order from cart lines, a shipping selection and a tax rate.

    Args:
        cart_items: Iterable of lines exposing ``unit_price`` and ``quantity``.
        catalog: The shipping options to resolve the selection against.
        selected_shipping_option_id: Id of the chosen shipping option.
        tax_rate: Fraction of the subtotal charged as tax.

    An id that does not resolve in the catalog prices shipping at zero.
    """
    subtotal = sum(item.unit_price * item.quantity for item in cart_items)

    shipping_option = find_shipping_option(selected_shipping_option_id, catalog)
    if shipping_option is None:
        logger.warning(
            "Shipping option not found in catalog, pricing shipping at zero",
            shipping_option_id=selected_shipping_option_id,
        )
        shipping_cost = 0.0
    else:
        shipping_cost = shipping_option.price

    tax = subtotal * tax_rate

    return OrderSummary(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax=tax,
        grand_total=subtotal + shipping_cost + tax,
        shipping_option=shipping_option,
    )


def format_price(amount, currency="BRL"):
    """Format an amount for display, e.g. ``R$ 1.234,56`` for reais."""
    symbol = _CURRENCY_SYMBOLS.get(currency, currency)
    formatted = f"{amount:,.2f}"
    if currency == "BRL":
        # Brazilian notation swaps the thousands and decimal separators
        formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{symbol} {formatted}"
