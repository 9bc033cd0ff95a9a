"""Template registry — maps notification types to template classes.

Each template knows its default channels and how to render content
from order context data.
"""

from storefront.templates.formatting import format_amount
from storefront.templates.order_confirmation import OrderConfirmationTemplate
from storefront.templates.refund_confirmation import RefundConfirmationTemplate
from storefront.templates.status_update import StatusUpdateTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    OrderConfirmationTemplate.notification_type: OrderConfirmationTemplate,
    StatusUpdateTemplate.notification_type: StatusUpdateTemplate,
    RefundConfirmationTemplate.notification_type: RefundConfirmationTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls


__all__ = ["TEMPLATE_REGISTRY", "format_amount", "get_template"]
