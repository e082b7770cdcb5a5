"""Static shipping catalog.

Three flat-rate delivery tiers compiled into the storefront. The catalog is
configuration, not customer data, so it is never persisted or edited at
runtime.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ShippingOption:
    """A named, flat-priced delivery choice. A price of zero means free."""

    id: str
    name: str
    price: float
    description: str


DEFAULT_SHIPPING_OPTION_ID = "standard"

SHIPPING_OPTIONS: tuple[ShippingOption, ...] = (
    ShippingOption(
        id="standard",
        name="Standard (3-5 business days)",
        price=0.0,
        description="Free delivery on orders over R$35",
    ),
    ShippingOption(
        id="express",
        name="Express (1-2 business days)",
        price=15.99,
        description="Delivered within 48 hours",
    ),
    ShippingOption(
        id="same-day",
        name="Same Day (today)",
        price=29.99,
        description="Only for orders placed before 2pm",
    ),
)


def find_shipping_option(option_id, catalog=SHIPPING_OPTIONS):
    """Return the catalog entry with the given id, or None."""
    return next((option for option in catalog if option.id == option_id), None)
