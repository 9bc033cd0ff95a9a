"""Order placement — command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    reference = String(required=True, max_length=64)
    owner_id = Identifier(required=True)
    shipping_address = Text(required=True)
    lines = Text(required=True)  # JSON: list of {product_id, quantity, price_at_purchase}


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines_data = json.loads(command.lines) if isinstance(command.lines, str) else command.lines

        # Header and lines are written together in the handler's unit of work.
        order = Order.place(
            reference=command.reference,
            owner_id=command.owner_id,
            shipping_address=command.shipping_address,
            lines_data=lines_data,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            reference=order.reference,
            total_amount=order.total_amount,
            line_count=len(order.lines),
        )
        return str(order.id)
