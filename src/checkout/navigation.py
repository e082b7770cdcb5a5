"""Navigation port — where the storefront sends the customer next.

Redirects are fire-and-forget side effects requested by the checkout flow;
they are not part of the session's state machine.
"""

from abc import ABC, abstractmethod

CART_PAGE = "/cart"
HOME_PAGE = "/"
ORDERS_PAGE = "/account/orders"


class Navigator(ABC):
    @abstractmethod
    def redirect(self, path: str) -> None:
        """Send the customer to another page."""
        ...


class RecordingNavigator(Navigator):
    """Keeps requested redirects in memory instead of performing them."""

    def __init__(self) -> None:
        self.redirects: list[str] = []

    def redirect(self, path: str) -> None:
        self.redirects.append(path)

    @property
    def last(self) -> str | None:
        return self.redirects[-1] if self.redirects else None
