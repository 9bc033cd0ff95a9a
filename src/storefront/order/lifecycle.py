"""Order lifecycle — admin-driven status transitions.

Ordinary transitions are a status write. The customer's status email and
the change-feed broadcast both hang off the resulting OrderStatusChanged
event, so they only happen once the write has committed. Moving an order
into cancellation hands it to the cancellation workflow instead.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cancellation.workflow import CancellationReport, CancellationWorkflow, cancellation_prompt
from storefront.domain import storefront
from storefront.exceptions import OrderNotFound, StatusUpdateFailed
from storefront.order.order import Order, OrderStatus, parse_status
from storefront.order.queries import find_order

logger = structlog.get_logger(__name__)

_CANCELLATION_TARGETS = {OrderStatus.CANCEL_REQUESTED, OrderStatus.CANCELLED}


@storefront.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)


@storefront.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.transition_to(command.status)
        repo.add(order)


@dataclass(frozen=True)
class TransitionResult:
    order_id: str
    previous_status: str
    status: str
    changed: bool
    cancellation: CancellationReport | None = None

    def to_dict(self) -> dict:
        data = {
            "order_id": self.order_id,
            "previous_status": self.previous_status,
            "status": self.status,
            "changed": self.changed,
        }
        if self.cancellation is not None:
            data["cancellation"] = self.cancellation.to_dict()
        return data


class OrderLifecycleController:
    def __init__(self, cancellation: CancellationWorkflow | None = None) -> None:
        self.cancellation = cancellation or CancellationWorkflow()

    def transition(self, order_id, new_status) -> TransitionResult:
        """Move an order to ``new_status``.

        Same-status requests succeed without doing anything. Illegal
        transitions raise ValidationError. A failed write raises
        StatusUpdateFailed carrying the status that still stands.
        """
        if not order_id:
            raise ValidationError({"order_id": ["Missing orderId"]})
        target = parse_status(new_status)

        order = find_order(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        previous = order.status

        if target.value == previous:
            return TransitionResult(order_id=str(order_id), previous_status=previous, status=previous, changed=False)

        if target in _CANCELLATION_TARGETS:
            report = self.cancellation.run(order_id)
            return TransitionResult(
                order_id=str(order_id),
                previous_status=previous,
                status=OrderStatus.CANCELLED.value,
                changed=True,
                cancellation=report,
            )

        try:
            self._persist(order_id, target)
        except ValidationError:
            raise
        except ObjectNotFoundError as exc:
            raise OrderNotFound(order_id) from exc
        except Exception as exc:
            logger.error(
                "Status update failed",
                order_id=str(order_id),
                previous_status=previous,
                requested_status=target.value,
                error=str(exc),
            )
            raise StatusUpdateFailed(order_id, previous) from exc

        logger.info(
            "Order status changed",
            order_id=str(order_id),
            reference=order.reference,
            previous_status=previous,
            status=target.value,
        )
        return TransitionResult(order_id=str(order_id), previous_status=previous, status=target.value, changed=True)

    def _persist(self, order_id, target):
        current_domain.process(ChangeOrderStatus(order_id=str(order_id), status=target.value), asynchronous=False)


def confirmation_prompt(order: Order, new_status) -> str:
    """Text an admin confirms before a status change is applied."""
    target = parse_status(new_status)
    if target in _CANCELLATION_TARGETS:
        return cancellation_prompt(order)
    return (
        f"Change status of order {order.reference}?\n\n"
        f"From: {order.status.upper()}\n"
        f"To: {target.value.upper()}"
    )
