"""Order event handlers that email the customer."""

import structlog
from protean import handle

from storefront.domain import storefront
from storefront.exceptions import ContactNotFound, OrderNotFound
from storefront.notifications.mailer import send_order_confirmation, send_status_update
from storefront.order.events import OrderPaid, OrderStatusChanged
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class OrderEmailHandler:
    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        try:
            send_order_confirmation(event.order_id)
        except (OrderNotFound, ContactNotFound) as exc:
            logger.warning("Order confirmation not sent", reference=event.reference, reason=str(exc))

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        try:
            send_status_update(event.order_id, event.new_status)
        except (OrderNotFound, ContactNotFound) as exc:
            logger.warning(
                "Status email not sent",
                reference=event.reference,
                new_status=event.new_status,
                reason=str(exc),
            )
