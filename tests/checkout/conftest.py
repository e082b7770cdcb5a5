import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _instant_submitter():
    """Place orders without the storefront's artificial delay."""
    from checkout.submission import reset_submitter, set_submitter
    from checkout.submission.simulated_adapter import SimulatedSubmitter

    set_submitter(SimulatedSubmitter(delay=0))
    yield
    reset_submitter()


# ---------------------------------------------------------------------------
# Shared data
# ---------------------------------------------------------------------------
COMPLETE_SHIPPING = {
    "first_name": "Ana",
    "last_name": "Souza",
    "email": "ana@example.com",
    "phone": "+55 11 91234-5678",
    "address": "Av. Paulista, 1000",
    "city": "São Paulo",
    "state": "SP",
    "zip_code": "01310-100",
}

COMPLETE_CARD = {
    "cardholder_name": "ANA SOUZA",
    "card_number": "4242424242424242",
    "expiry_date": "1228",
    "cvv": "123",
}


@pytest.fixture()
def cart():
    """A cart with two books worth 100.00 in total."""
    from checkout.cart.cart import Cart

    cart = Cart.create(customer_id="cust-001")
    cart.add_item(product_id="book-001", title="Dom Casmurro", author="Machado de Assis", unit_price=30.0, quantity=2)
    cart.add_item(product_id="book-002", title="Vidas Secas", author="Graciliano Ramos", unit_price=40.0, quantity=1)
    cart._events.clear()
    return cart


@pytest.fixture()
def complete_shipping():
    return dict(COMPLETE_SHIPPING)


@pytest.fixture()
def complete_card():
    return dict(COMPLETE_CARD)
