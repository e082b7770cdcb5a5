"""Checkout bounded context — the storefront checkout wizard.

Handles the four-stage checkout session (shipping → payment → review →
confirmation), order pricing, simulated order submission, and the shopping
cart the checkout reads from.
"""

import structlog
from protean.domain import Domain

from checkout.utils.logging import configure_logging

configure_logging()

checkout = Domain(name="checkout")

logger = structlog.get_logger(__name__)
