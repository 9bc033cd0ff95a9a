"""Tests for the Order aggregate and its state machine."""

import pytest
from protean.exceptions import ValidationError
from storefront.order.events import (
    OrderCancellationRequested,
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
)
from storefront.order.order import Order, OrderLine, OrderStatus, parse_status

LINES = [
    {"product_id": "p-1", "quantity": 3, "price_at_purchase": 10000},
    {"product_id": "p-2", "quantity": 1, "price_at_purchase": 2500},
]


def _place(**overrides):
    params = {
        "reference": "ORDER-1-abcd0123",
        "owner_id": "user-001",
        "shipping_address": "Jl. Merdeka 1, Bandung",
        "lines_data": LINES,
    }
    params.update(overrides)
    return Order.place(**params)


def _order_in(status):
    order = _place()
    order.status = status.value
    order._events.clear()
    return order


class TestPlace:
    def test_total_is_sum_of_lines(self):
        order = _place()
        assert order.total_amount == 32500
        assert order.status == OrderStatus.PENDING.value
        assert len(order.lines) == 2

    def test_raises_order_placed(self):
        order = _place()
        placed = [e for e in order._events if isinstance(e, OrderPlaced)]
        assert len(placed) == 1
        assert placed[0].total_amount == 32500
        assert placed[0].owner_id == "user-001"

    def test_requires_lines(self):
        with pytest.raises(ValidationError) as exc:
            _place(lines_data=[])
        assert "lines" in exc.value.messages

    def test_requires_address(self):
        with pytest.raises(ValidationError):
            _place(shipping_address="   ")

    def test_rejects_total_that_drifts_from_lines(self):
        with pytest.raises(ValidationError):
            Order(
                reference="ORDER-2-abcd0123",
                owner_id="user-001",
                shipping_address="Somewhere",
                total_amount=1,
                lines=[OrderLine(product_id="p-1", quantity=2, price_at_purchase=10000)],
            )

    def test_line_subtotal(self):
        line = OrderLine(product_id="p-1", quantity=3, price_at_purchase=10000)
        assert line.subtotal == 30000


class TestPayment:
    def test_mark_paid(self):
        order = _order_in(OrderStatus.PENDING)
        assert order.mark_paid() is True
        assert order.status == OrderStatus.PAID.value
        assert isinstance(order._events[-1], OrderPaid)

    def test_repeated_payment_is_ignored(self):
        order = _order_in(OrderStatus.PAID)
        assert order.mark_paid() is False
        assert order._events == []

    def test_cannot_pay_a_shipped_order(self):
        order = _order_in(OrderStatus.SHIPPED)
        with pytest.raises(ValidationError):
            order.mark_paid()


class TestTransitions:
    @pytest.mark.parametrize(
        "start, target",
        [
            (OrderStatus.PAID, "shipped"),
            (OrderStatus.SHIPPED, "delivered"),
        ],
    )
    def test_forward_transitions(self, start, target):
        order = _order_in(start)
        order.transition_to(target)
        assert order.status == target
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == start.value
        assert event.new_status == target

    @pytest.mark.parametrize(
        "start, target",
        [
            (OrderStatus.PENDING, "shipped"),
            (OrderStatus.PAID, "delivered"),
            (OrderStatus.DELIVERED, "shipped"),
            (OrderStatus.SHIPPED, "paid"),
        ],
    )
    def test_illegal_transitions(self, start, target):
        order = _order_in(start)
        with pytest.raises(ValidationError):
            order.transition_to(target)
        assert order.status == start.value

    def test_payment_is_not_an_admin_transition(self):
        order = _order_in(OrderStatus.PENDING)
        with pytest.raises(ValidationError) as exc:
            order.transition_to("paid")
        assert "payment gateway" in exc.value.messages["status"][0]
        assert order.status == OrderStatus.PENDING.value

    def test_cancellation_is_not_a_plain_transition(self):
        order = _order_in(OrderStatus.PAID)
        with pytest.raises(ValidationError):
            order.transition_to("cancelled")

    def test_parse_status_is_case_insensitive(self):
        assert parse_status("SHIPPED") == OrderStatus.SHIPPED

    def test_parse_status_rejects_unknown(self):
        with pytest.raises(ValidationError):
            parse_status("lost")


class TestCancellation:
    @pytest.mark.parametrize("start", [OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.SHIPPED])
    def test_request_cancellation(self, start):
        order = _order_in(start)
        order.request_cancellation(refund_id="ref-1")
        assert order.status == OrderStatus.CANCEL_REQUESTED.value
        assert isinstance(order._events[-1], OrderCancellationRequested)

    def test_request_cancellation_twice_is_a_no_op(self):
        order = _order_in(OrderStatus.CANCEL_REQUESTED)
        order.request_cancellation()
        assert order._events == []

    def test_delivered_orders_cannot_be_cancelled(self):
        order = _order_in(OrderStatus.DELIVERED)
        assert order.is_cancellable is False
        with pytest.raises(ValidationError):
            order.request_cancellation()

    def test_mark_cancelled(self):
        order = _order_in(OrderStatus.CANCEL_REQUESTED)
        order.mark_cancelled(refunded_amount=order.total_amount)
        assert order.status == OrderStatus.CANCELLED.value
        event = order._events[-1]
        assert isinstance(event, OrderCancelled)
        assert event.refunded_amount == 32500

    def test_discard_lines(self):
        order = _order_in(OrderStatus.CANCELLED)
        order.discard_lines()
        assert order.lines == []
        assert order.total_amount == 32500
