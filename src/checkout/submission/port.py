"""Order submission port (abstract interface).

Defines the contract for placing an order once the customer confirms the
review stage. Swapping the simulated adapter for a real order service does
not touch the checkout session or the flow that drives it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SubmissionRequest:
    """Everything an order service needs to accept an order."""

    session_id: str
    cart_id: str
    shipping: dict
    payment_method: str
    shipping_option_id: str
    grand_total: float


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of an order submission attempt."""

    success: bool
    order_number: str | None = None
    fulfillment_status: str | None = None
    failure_reason: str | None = None


class OrderSubmitter(ABC):
    """Abstract order submission interface."""

    @abstractmethod
    async def submit(self, request: SubmissionRequest) -> SubmissionResult:
        """Place the order described by the request."""
        ...
