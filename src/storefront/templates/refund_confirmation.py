"""Refund confirmation template — sent after a cancelled order is refunded."""

from storefront.templates.formatting import format_amount, item_lines, store_name


class RefundConfirmationTemplate:
    notification_type = "refund_confirmation"
    default_channels = ["Email"]

    @staticmethod
    def render(context: dict) -> dict:
        reference = context.get("reference", "N/A")
        return {
            "subject": f"Refund Processed - {reference}",
            "body": (
                f"Your order {reference} has been CANCELLED & REFUNDED.\n\n"
                f"Refund amount: {format_amount(context.get('refund_amount', 0))}\n\n"
                f"Items:\n{item_lines(context.get('items', []))}\n\n"
                "The refund should appear in your account within a few "
                "business days, depending on your payment provider.\n\n"
                f"{store_name()}"
            ),
        }
