"""Status update template — sent when an admin moves an order along."""

from storefront.templates.formatting import format_amount, item_lines, store_name


class StatusUpdateTemplate:
    notification_type = "status_update"
    default_channels = ["Email"]

    @staticmethod
    def render(context: dict) -> dict:
        reference = context.get("reference", "N/A")
        status = str(context.get("status", "")).upper()
        return {
            "subject": f"Order {reference} is now {status}",
            "body": (
                f"Your order {reference} is now {status}.\n\n"
                f"Shipping to: {context.get('shipping_address', '')}\n\n"
                f"Items:\n{item_lines(context.get('items', []))}\n\n"
                f"Total: {format_amount(context.get('total_amount', 0))}\n\n"
                f"Thank you for shopping with {store_name()}."
            ),
        }
