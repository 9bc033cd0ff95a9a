"""Order erasure — the last step of a cancellation.

The order is marked cancelled, its lines are dropped and the header is
hard-deleted inside one unit of work, so ``OrderCancelled`` only reaches
subscribers once the delete has gone through.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class EraseOrder:
    order_id = Identifier(required=True)
    refunded_amount = Integer(default=0)


@storefront.command_handler(part_of=Order)
class OrderErasureHandler:
    @handle(EraseOrder)
    def erase_order(self, command):
        """Returns True once the order is gone. An absent order counts as erased."""
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            return True

        if order.current_status != OrderStatus.CANCELLED:
            order.mark_cancelled(command.refunded_amount)
        order.discard_lines()
        repo.add(order)
        repo._dao.delete(order)
        return True
