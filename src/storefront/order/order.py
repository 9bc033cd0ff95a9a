"""Order aggregate — a placed order and its price-snapshot lines.

State Machine:
    PENDING → PAID → SHIPPED → DELIVERED
    PENDING/PAID/SHIPPED → CANCEL_REQUESTED → CANCELLED

PENDING → PAID is driven by checkout when the gateway confirms payment.
Every other transition is admin-initiated. Reaching CANCELLED is the
cancellation workflow's job: it refunds, restocks and then hard-deletes the
order, so a CANCELLED order is only ever observed in flight.

The total is computed from the lines when the order is placed and is never
recomputed, so later catalogue price changes cannot alter it.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancellationRequested,
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
)


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCEL_REQUESTED = "cancel_requested"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCEL_REQUESTED, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.SHIPPED, OrderStatus.CANCEL_REQUESTED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCEL_REQUESTED, OrderStatus.CANCELLED},
    OrderStatus.CANCEL_REQUESTED: {OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_CANCELLABLE_STATES = {
    OrderStatus.PENDING,
    OrderStatus.PAID,
    OrderStatus.SHIPPED,
    OrderStatus.CANCEL_REQUESTED,
}

_CANCELLATION_STATES = {OrderStatus.CANCEL_REQUESTED, OrderStatus.CANCELLED}


def parse_status(value) -> OrderStatus:
    """Coerce a status name (any case) into an OrderStatus."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status: {value}"]}) from None


@storefront.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price_at_purchase = Integer(required=True, min_value=0)

    @property
    def subtotal(self):
        return self.price_at_purchase * self.quantity


@storefront.aggregate
class Order:
    reference = String(required=True, max_length=64, unique=True)
    owner_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total_amount = Integer(required=True, min_value=0)
    shipping_address = Text(required=True)
    lines = HasMany(OrderLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_lines(self):
        if self.lines and self.total_amount != sum(line.subtotal for line in self.lines):
            raise ValidationError({"total_amount": ["Order total must equal the sum of its lines"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, reference, owner_id, shipping_address, lines_data):
        """Create a pending order from ``{product_id, quantity, price_at_purchase}`` dicts."""
        if not lines_data:
            raise ValidationError({"lines": ["An order needs at least one line"]})
        if not shipping_address or not shipping_address.strip():
            raise ValidationError({"shipping_address": ["Shipping address is required"]})

        lines = [
            OrderLine(
                product_id=str(line["product_id"]),
                quantity=line["quantity"],
                price_at_purchase=line["price_at_purchase"],
            )
            for line in lines_data
        ]
        now = datetime.now(UTC)
        order = cls(
            reference=reference,
            owner_id=owner_id,
            status=OrderStatus.PENDING.value,
            total_amount=sum(line.subtotal for line in lines),
            shipping_address=shipping_address.strip(),
            lines=lines,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                reference=order.reference,
                owner_id=str(order.owner_id),
                status=order.status,
                total_amount=order.total_amount,
                shipping_address=order.shipping_address,
                lines=json.dumps(
                    [
                        {
                            "line_id": str(line.id),
                            "product_id": str(line.product_id),
                            "quantity": line.quantity,
                            "price_at_purchase": line.price_at_purchase,
                        }
                        for line in order.lines
                    ]
                ),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_cancellable(self) -> bool:
        return self.current_status in _CANCELLABLE_STATES

    def _assert_can_transition(self, target_state):
        current = self.current_status
        if target_state not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_state.value}"]})

    def mark_paid(self):
        """Record the gateway's payment confirmation.

        A repeated confirmation for an already paid order is ignored.
        Returns True only when the order moved to PAID.
        """
        if self.current_status == OrderStatus.PAID:
            return False
        self._assert_can_transition(OrderStatus.PAID)

        now = datetime.now(UTC)
        self.status = OrderStatus.PAID.value
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                reference=self.reference,
                owner_id=str(self.owner_id),
                total_amount=self.total_amount,
                paid_at=now,
            )
        )
        return True

    def transition_to(self, new_status):
        """Move to ``new_status`` along the admin-driven lifecycle."""
        target = parse_status(new_status)
        if target in _CANCELLATION_STATES:
            raise ValidationError({"status": ["Cancellation goes through the cancellation workflow"]})
        if target == OrderStatus.PAID:
            raise ValidationError({"status": ["Payment is recorded by the payment gateway callback"]})
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                reference=self.reference,
                owner_id=str(self.owner_id),
                previous_status=previous,
                new_status=self.status,
                changed_at=now,
            )
        )

    def request_cancellation(self, refund_id=None):
        if self.current_status == OrderStatus.CANCEL_REQUESTED:
            return
        if not self.is_cancellable:
            raise ValidationError({"status": [f"Cannot cancel an order in {self.status} state"]})

        previous = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCEL_REQUESTED.value
        self.updated_at = now

        self.raise_(
            OrderCancellationRequested(
                order_id=str(self.id),
                reference=self.reference,
                owner_id=str(self.owner_id),
                previous_status=previous,
                refund_id=refund_id,
                requested_at=now,
            )
        )

    def mark_cancelled(self, refunded_amount):
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reference=self.reference,
                owner_id=str(self.owner_id),
                refunded_amount=refunded_amount,
                cancelled_at=now,
            )
        )

    def discard_lines(self):
        """Drop every line ahead of deleting the order header."""
        with atomic_change(self):
            for line in list(self.lines or []):
                self.remove_lines(line)
