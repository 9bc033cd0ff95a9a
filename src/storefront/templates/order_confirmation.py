"""Order confirmation template — sent once payment for an order succeeds."""

from storefront.templates.formatting import format_amount, item_lines, store_name


class OrderConfirmationTemplate:
    notification_type = "order_confirmation"
    default_channels = ["Email"]

    @staticmethod
    def render(context: dict) -> dict:
        reference = context.get("reference", "N/A")
        return {
            "subject": f"Order Confirmation - {reference}",
            "body": (
                f"Thank you for your order with {store_name()}!\n\n"
                f"Order: {reference}\n"
                f"Status: {context.get('status', 'Paid')}\n"
                f"Shipping to: {context.get('shipping_address', '')}\n\n"
                f"Items:\n{item_lines(context.get('items', []))}\n\n"
                f"Total: {format_amount(context.get('total_amount', 0))}\n\n"
                "We'll let you know when your order ships."
            ),
        }
