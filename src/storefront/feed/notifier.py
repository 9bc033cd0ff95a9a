"""Event handlers that republish order and product changes on the change feed."""

from protean import handle

from storefront.catalogue.events import ProductAdded, ProductRemoved, ProductUpdated, StockAdjusted
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.feed.feed import ChangeEvent, ChangeKind, get_feed
from storefront.order.events import (
    OrderCancellationRequested,
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderStatusChanged,
)
from storefront.order.order import Order, OrderStatus

ORDERS = "orders"
PRODUCTS = "products"


def _publish(table, kind, row):
    get_feed().publish(ChangeEvent(table=table, kind=kind, row=row))


def _order_row(event, **changes):
    return {"id": str(event.order_id), "reference": event.reference, "owner_id": str(event.owner_id), **changes}


@storefront.event_handler(part_of=Order)
class OrderChangeNotifier:
    @handle(OrderPlaced)
    def on_placed(self, event: OrderPlaced) -> None:
        _publish(
            ORDERS,
            ChangeKind.INSERT,
            _order_row(
                event,
                status=event.status,
                total_amount=event.total_amount,
                shipping_address=event.shipping_address,
                created_at=event.placed_at,
                updated_at=event.placed_at,
            ),
        )

    @handle(OrderPaid)
    def on_paid(self, event: OrderPaid) -> None:
        _publish(ORDERS, ChangeKind.UPDATE, _order_row(event, status=OrderStatus.PAID.value, updated_at=event.paid_at))

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        _publish(ORDERS, ChangeKind.UPDATE, _order_row(event, status=event.new_status, updated_at=event.changed_at))

    @handle(OrderCancellationRequested)
    def on_cancellation_requested(self, event: OrderCancellationRequested) -> None:
        _publish(
            ORDERS,
            ChangeKind.UPDATE,
            _order_row(event, status=OrderStatus.CANCEL_REQUESTED.value, updated_at=event.requested_at),
        )

    @handle(OrderCancelled)
    def on_cancelled(self, event: OrderCancelled) -> None:
        _publish(ORDERS, ChangeKind.DELETE, _order_row(event, updated_at=event.cancelled_at))


@storefront.event_handler(part_of=Product)
class ProductChangeNotifier:
    @handle(ProductAdded)
    def on_added(self, event: ProductAdded) -> None:
        _publish(
            PRODUCTS,
            ChangeKind.INSERT,
            {
                "id": str(event.product_id),
                "name": event.name,
                "price": event.price,
                "stock": event.stock,
                "category": event.category,
                "image_url": event.image_url,
                "updated_at": event.added_at,
            },
        )

    @handle(ProductUpdated)
    def on_updated(self, event: ProductUpdated) -> None:
        _publish(
            PRODUCTS,
            ChangeKind.UPDATE,
            {
                "id": str(event.product_id),
                "name": event.name,
                "price": event.price,
                "stock": event.stock,
                "category": event.category,
                "image_url": event.image_url,
                "updated_at": event.updated_at,
            },
        )

    @handle(StockAdjusted)
    def on_stock_adjusted(self, event: StockAdjusted) -> None:
        _publish(
            PRODUCTS,
            ChangeKind.UPDATE,
            {"id": str(event.product_id), "stock": event.new_stock, "updated_at": event.adjusted_at},
        )

    @handle(ProductRemoved)
    def on_removed(self, event: ProductRemoved) -> None:
        _publish(PRODUCTS, ChangeKind.DELETE, {"id": str(event.product_id), "updated_at": event.removed_at})
