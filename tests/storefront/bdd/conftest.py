"""Shared BDD fixtures and step definitions for the Storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.catalogue.management import RemoveProduct
from storefront.catalogue.product import Product
from storefront.inventory.ledger import InventoryLedger
from storefront.order.payment import RecordPaymentSuccess
from storefront.order.queries import find_order


@pytest.fixture()
def context():
    """Mutable scenario state shared between steps."""
    return {"products": {}, "order_id": None, "report": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:d} with {stock:d} in stock'))
def _(context, make_product, name, price, stock):
    context["products"][name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('a customer "{user_id}" with email "{email}"'))
def _(make_customer, user_id, email):
    make_customer(user_id=user_id, email=email)


@given(parsers.cfparse('a paid order for "{user_id}" of {quantity:d} "{name}"'))
def _(context, place_order, mailbox, user_id, quantity, name):
    product_id = context["products"][name]
    price = current_domain.repository_for(Product).get(product_id).price
    order_id = place_order(user_id, [{"product_id": product_id, "quantity": quantity, "price_at_purchase": price}])
    current_domain.process(RecordPaymentSuccess(order_id=order_id), asynchronous=False)
    InventoryLedger().withdraw(product_id, quantity)
    mailbox.sent_emails.clear()
    context["order_id"] = order_id


@given("the payment gateway declines refunds")
def _(gateway):
    gateway.configure(should_succeed=False, failure_reason="Transaction not settled")


@given(parsers.cfparse('the product "{name}" has been deleted'))
def _(context, name):
    current_domain.process(RemoveProduct(product_id=context["products"][name]), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(context, name, stock):
    assert current_domain.repository_for(Product).get(context["products"][name]).stock == stock


@then("the order no longer exists")
def _(context):
    assert find_order(context["order_id"]) is None


@then(parsers.cfparse('the order is still "{status}"'))
def _(context, status):
    assert find_order(context["order_id"]).status == status


@then("no email is sent")
def _(mailbox):
    assert mailbox.sent_emails == []
