"""Storefront workflow exceptions.

Raised by the checkout, lifecycle and cancellation workflows when an
external dependency fails or a referenced record cannot be resolved.
The API layer translates them into ``{"error": ...}`` responses.
Field-level validation failures use Protean's ``ValidationError``.
"""


class OrderNotFound(Exception):
    """The requested order does not exist (and was never cancelled here)."""

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__("Order not found")


class ContactNotFound(Exception):
    """The order owner's contact email could not be resolved."""

    def __init__(self, owner_id):
        self.owner_id = owner_id
        super().__init__("User email not found")


class PaymentGatewayError(Exception):
    """The payment gateway could not create a payment session."""


class RefundFailed(Exception):
    """The payment gateway did not confirm a refund. Nothing else was changed."""

    def __init__(self, reference, reason=None):
        self.reference = reference
        self.reason = reason
        super().__init__("Refund failed")


class StatusUpdateFailed(Exception):
    """Persisting an order status change failed; the previous status stands."""

    def __init__(self, order_id, previous_status):
        self.order_id = order_id
        self.previous_status = previous_status
        super().__init__("Failed to update status")
