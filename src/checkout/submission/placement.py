"""Order placement — runs one submission for a session in review.

Ties the session's submission lifecycle to the submitter and the cart:
the session is marked pending, the submitter is awaited under a timeout,
and the outcome is recorded. The cart is cleared only after a success.
"""

import asyncio

import structlog
from protean.exceptions import ValidationError

from checkout.pricing.summary import TAX_RATE
from checkout.submission.port import SubmissionRequest, SubmissionResult

logger = structlog.get_logger(__name__)

SUBMISSION_TIMEOUT_SECONDS = 10.0


async def place_order(
    session,
    cart,
    submitter,
    timeout=SUBMISSION_TIMEOUT_SECONDS,
    tax_rate=TAX_RATE,
    on_submission_started=None,
):
    """Submit the session's order and record the outcome.

    Args:
        session: A CheckoutSession in the review stage.
        cart: The cart being checked out (``items``, ``is_empty()``, ``clear()``).
        submitter: The OrderSubmitter that places the order.
        timeout: Seconds to wait before treating the submission as failed.
        tax_rate: Tax rate used to price the order.
        on_submission_started: Called with the session once it is pending and
            before the submitter is awaited, so a caller can persist the
            pending state and other requests see the submission in flight.

    Returns:
        The SubmissionResult. Failures leave the session in review.

    A submission that is cancelled or raises is recorded as failed before
    the exception propagates, so the session never stays pending.
    """
    if cart.is_empty():
        raise ValidationError({"cart": ["Cannot place an order for an empty cart"]})

    summary = session.summary_for(cart.items, tax_rate)
    session.begin_submission()
    if on_submission_started is not None:
        on_submission_started(session)

    request = SubmissionRequest(
        session_id=str(session.id),
        cart_id=str(session.cart_id),
        shipping=session.shipping.to_dict(),
        payment_method=session.payment.payment_method,
        shipping_option_id=session.shipping_option_id,
        grand_total=summary.grand_total,
    )
    logger.info(
        "Placing order",
        session_id=request.session_id,
        grand_total=summary.grand_total,
        payment_method=request.payment_method,
    )

    try:
        result = await asyncio.wait_for(submitter.submit(request), timeout)
    except TimeoutError:
        result = SubmissionResult(
            success=False,
            failure_reason=f"Order submission timed out after {timeout} seconds",
        )
    except asyncio.CancelledError:
        session.record_submission_failure("Order submission was cancelled")
        logger.warning("Order submission cancelled", session_id=request.session_id)
        raise
    except Exception as exc:
        session.record_submission_failure(str(exc) or exc.__class__.__name__)
        raise

    if result.success:
        session.record_submission_success(result.order_number, summary.grand_total)
        cart.clear()
        logger.info(
            "Order placed",
            session_id=request.session_id,
            order_number=result.order_number,
        )
    else:
        session.record_submission_failure(result.failure_reason)
        logger.warning(
            "Order submission failed",
            session_id=request.session_id,
            reason=result.failure_reason,
        )

    return result
