import pytest


@pytest.fixture(scope="session")
def _storefront_domain(request):
    """Initialize the storefront domain once per session."""
    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain
    from storefront.cart.cache import reset_cart_cache
    from storefront.channel import reset_email_channel
    from storefront.feed.feed import reset_feed
    from storefront.gateway import reset_gateway

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()

    reset_gateway()
    reset_email_channel()
    reset_feed()
    reset_cart_cache()


@pytest.fixture()
def gateway():
    from storefront.gateway import get_gateway

    return get_gateway()


@pytest.fixture()
def mailbox():
    from storefront.channel import get_email_channel

    return get_email_channel()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    from protean import current_domain
    from storefront.catalogue.management import AddProduct

    def _make(name="Kopi Susu", price=10000, stock=5, category="drinks", image_url=None):
        return current_domain.process(
            AddProduct(name=name, price=price, stock=stock, category=category, image_url=image_url),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def make_customer():
    from protean import current_domain
    from storefront.customer.profile import RegisterCustomer

    def _make(user_id="user-001", email="sari@example.com", full_name="Sari", address=None):
        return current_domain.process(
            RegisterCustomer(user_id=user_id, email=email, full_name=full_name, address=address),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def place_order():
    """Place a pending order directly, bypassing checkout."""
    import json

    from protean import current_domain
    from storefront.order.placement import PlaceOrder
    from storefront.order.reference import generate_order_reference

    def _place(owner_id, lines, shipping_address="Jl. Merdeka 1, Bandung"):
        return current_domain.process(
            PlaceOrder(
                reference=generate_order_reference(),
                owner_id=owner_id,
                shipping_address=shipping_address,
                lines=json.dumps(lines),
            ),
            asynchronous=False,
        )

    return _place
