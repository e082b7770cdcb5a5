"""Order submitter factory.

Provides get_submitter() / set_submitter() to swap implementations:
- SimulatedSubmitter for the storefront and for testing
"""

from checkout.submission.port import OrderSubmitter
from checkout.submission.simulated_adapter import SimulatedSubmitter

_current_submitter: OrderSubmitter | None = None


def get_submitter() -> OrderSubmitter:
    """Return the current order submitter. Defaults to SimulatedSubmitter."""
    global _current_submitter
    if _current_submitter is None:
        _current_submitter = SimulatedSubmitter()
    return _current_submitter


def set_submitter(submitter: OrderSubmitter) -> None:
    """Override the active order submitter (useful for tests)."""
    global _current_submitter
    _current_submitter = submitter


def reset_submitter() -> None:
    """Reset to default submitter."""
    global _current_submitter
    _current_submitter = None
