"""Shared formatting helpers for customer-facing messages."""

import os


def format_amount(amount) -> str:
    """Render an integer rupiah amount as ``Rp 30.000``."""
    value = int(amount or 0)
    sign = "-" if value < 0 else ""
    return f"{sign}Rp {abs(value):,}".replace(",", ".")


def store_name() -> str:
    return os.environ.get("STORE_NAME", "Storefront")


def item_lines(items: list[dict]) -> str:
    """One ``<name> x <qty> - Rp <line total>`` row per item."""
    if not items:
        return "(no items)"
    return "\n".join(
        f"- {item.get('name') or 'Item'} x {item['quantity']} - {format_amount(item['line_total'])}" for item in items
    )
