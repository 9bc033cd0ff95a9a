"""Storefront bounded context — catalogue, cart, orders, checkout and cancellation.

Handles the order lifecycle of a single-currency storefront: carts become
pending orders at checkout, payment-gateway callbacks mark them paid and
withdraw stock, admins move them through fulfilment, and cancellation
refunds the payment, restores stock, notifies the customer and erases the
order.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
