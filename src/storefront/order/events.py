"""Domain events for the Order aggregate.

Every event carries the owner so that change-feed subscribers can filter
on "orders where owner = X" without reloading the order.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """Checkout created a pending order and its lines."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    reference = String(required=True)
    owner_id = Identifier(required=True)
    status = String(required=True)
    total_amount = Integer(required=True)
    shipping_address = Text(required=True)
    lines = Text(required=True)  # JSON: list of line dicts
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    """The payment gateway confirmed the order's payment."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    reference = String(required=True)
    owner_id = Identifier(required=True)
    total_amount = Integer(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An admin moved the order along its lifecycle."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    reference = String(required=True)
    owner_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancellationRequested:
    """The refund went through and the order is being unwound."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    reference = String(required=True)
    owner_id = Identifier(required=True)
    previous_status = String(required=True)
    refund_id = String()
    requested_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was refunded and is about to be erased."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    reference = String(required=True)
    owner_id = Identifier(required=True)
    refunded_amount = Integer(required=True)
    cancelled_at = DateTime(required=True)
