"""Payment confirmation — command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class RecordPaymentSuccess:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class PaymentConfirmationHandler:
    @handle(RecordPaymentSuccess)
    def record_payment_success(self, command):
        """Mark the order paid. Returns False for a repeated confirmation."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not order.mark_paid():
            return False
        repo.add(order)
        return True
