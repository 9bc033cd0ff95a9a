from types import SimpleNamespace

import pytest
from protean import current_domain
from storefront.order.payment import RecordPaymentSuccess


@pytest.fixture()
def seeded_order(make_product, make_customer, place_order, mailbox):
    """A paid order for user-001: 2 x Kopi Susu (stock 5) and 1 x Roti (stock 3).

    The confirmation email sent on payment is cleared from the mailbox.
    """
    kopi = make_product(name="Kopi Susu", price=10000, stock=5)
    roti = make_product(name="Roti Bakar", price=8000, stock=3, category="food")
    make_customer(user_id="user-001", email="sari@example.com")
    order_id = place_order(
        "user-001",
        [
            {"product_id": kopi, "quantity": 2, "price_at_purchase": 10000},
            {"product_id": roti, "quantity": 1, "price_at_purchase": 8000},
        ],
    )
    current_domain.process(RecordPaymentSuccess(order_id=order_id), asynchronous=False)
    mailbox.sent_emails.clear()
    return SimpleNamespace(order_id=order_id, kopi=kopi, roti=roti, total=28000)
