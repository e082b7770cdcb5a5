"""Simulated order submitter for the storefront and for tests.

No order service exists behind the storefront yet, so placing an order waits
for a short delay and then accepts it with a store-prefixed order number.
The delay is injectable (tests use zero) and the adapter can be configured
to fail, the same way a fake payment gateway is.
"""

import asyncio
import random

from checkout.session.session import FulfillmentStatus
from checkout.submission.port import OrderSubmitter, SubmissionRequest, SubmissionResult

ORDER_NUMBER_PREFIX = "GBS"
SUBMISSION_DELAY_SECONDS = 1.5


def random_order_number(prefix=ORDER_NUMBER_PREFIX):
    """A six-digit order number such as ``GBS-482913``. Not guaranteed unique."""
    return f"{prefix}-{random.randint(100000, 999999)}"


class SimulatedSubmitter(OrderSubmitter):
    """Configurable simulated order submitter."""

    def __init__(self, delay: float = SUBMISSION_DELAY_SECONDS, order_numbers=random_order_number) -> None:
        self.delay = delay
        self.order_numbers = order_numbers
        self.should_succeed: bool = True
        self.failure_reason: str = "Order could not be placed"
        self.requests: list[SubmissionRequest] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Order could not be placed") -> None:
        """Configure submitter behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    async def submit(self, request: SubmissionRequest) -> SubmissionResult:
        self.requests.append(request)

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.should_succeed:
            return SubmissionResult(
                success=True,
                order_number=self.order_numbers(),
                fulfillment_status=FulfillmentStatus.RECEIVED.value,
            )
        return SubmissionResult(
            success=False,
            failure_reason=self.failure_reason,
        )
