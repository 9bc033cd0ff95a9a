"""Storefront API package."""

from storefront.api.errors import install_error_handlers
from storefront.api.routes import notification_router, order_router, product_router, transaction_router

__all__ = [
    "install_error_handlers",
    "notification_router",
    "order_router",
    "product_router",
    "transaction_router",
]
