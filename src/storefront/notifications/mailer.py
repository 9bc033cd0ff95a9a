"""Customer email dispatch for order events.

Email is best-effort everywhere: delivery failures are logged and reported
as False, never raised. Resolving the order or the recipient is not
best-effort and raises OrderNotFound / ContactNotFound.
"""

import structlog

from storefront.channel import get_email_channel
from storefront.channel.email_port import is_delivered
from storefront.customer.profile import contact_email_for
from storefront.exceptions import ContactNotFound, OrderNotFound
from storefront.order.queries import describe_lines, find_order
from storefront.templates import get_template

logger = structlog.get_logger(__name__)


def _load(order_id):
    order = find_order(order_id)
    if order is None:
        raise OrderNotFound(order_id)
    recipient = contact_email_for(order.owner_id)
    if recipient is None:
        raise ContactNotFound(order.owner_id)
    return order, recipient


def _deliver(recipient, notification_type, context) -> bool:
    content = get_template(notification_type).render(context)
    try:
        result = get_email_channel().send(to=recipient, subject=content["subject"], body=content["body"])
    except Exception as exc:
        logger.error(
            "Email dispatch raised",
            notification_type=notification_type,
            reference=context.get("reference"),
            error=str(exc),
        )
        return False

    if not is_delivered(result):
        logger.error(
            "Email dispatch failed",
            notification_type=notification_type,
            reference=context.get("reference"),
            error=(result or {}).get("error"),
        )
        return False

    logger.info(
        "Email sent",
        notification_type=notification_type,
        reference=context.get("reference"),
        message_id=result.get("message_id"),
    )
    return True


def send_status_update(order_id, status=None) -> bool:
    """Tell the customer their order is now ``status`` (defaults to the stored one)."""
    order, recipient = _load(order_id)
    return _deliver(
        recipient,
        "status_update",
        {
            "reference": order.reference,
            "status": status or order.status,
            "shipping_address": order.shipping_address,
            "items": describe_lines(order.lines or [], fallback="Item"),
            "total_amount": order.total_amount,
        },
    )


def send_order_confirmation(order_id) -> bool:
    order, recipient = _load(order_id)
    return _deliver(
        recipient,
        "order_confirmation",
        {
            "reference": order.reference,
            "status": order.status.capitalize(),
            "shipping_address": order.shipping_address,
            "items": describe_lines(order.lines or [], fallback="Item"),
            "total_amount": order.total_amount,
        },
    )


def send_refund_confirmation(recipient, reference, refund_amount, items) -> bool:
    """``items`` is the order's former contents as produced by ``describe_lines``."""
    return _deliver(
        recipient,
        "refund_confirmation",
        {"reference": reference, "refund_amount": refund_amount, "items": items},
    )
