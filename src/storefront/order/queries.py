"""Order read helpers: lookups and the customer/admin order views."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.queries import product_names
from storefront.order.order import Order, parse_status


def find_order(order_id) -> Order | None:
    if not order_id:
        return None
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        return None


def describe_lines(lines, fallback="Unknown") -> list[dict]:
    """Resolve product names for display. Deleted products show ``fallback``."""
    names = product_names(line.product_id for line in lines)
    return [
        {
            "line_id": str(line.id),
            "product_id": str(line.product_id),
            "name": names.get(str(line.product_id), fallback),
            "quantity": line.quantity,
            "price_at_purchase": line.price_at_purchase,
            "line_total": line.subtotal,
        }
        for line in lines
    ]


def order_view(order: Order, fallback="Unknown") -> dict:
    return {
        "id": str(order.id),
        "reference": order.reference,
        "owner_id": str(order.owner_id),
        "status": order.status,
        "total_amount": order.total_amount,
        "shipping_address": order.shipping_address,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
        "items": describe_lines(order.lines or [], fallback=fallback),
    }


def order_views(owner_id=None, status=None) -> list[dict]:
    """Orders newest first: a customer's history when ``owner_id`` is given,
    otherwise the admin list, optionally narrowed to one status."""
    filters = {}
    if owner_id:
        filters["owner_id"] = str(owner_id)
    if status:
        filters["status"] = parse_status(status).value

    dao = current_domain.repository_for(Order)._dao
    orders = dao.query.filter(**filters).all().items if filters else dao.query.all().items
    orders = sorted(orders, key=lambda o: o.created_at.timestamp() if o.created_at else 0, reverse=True)
    return [order_view(order) for order in orders]
