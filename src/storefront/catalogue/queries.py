"""Catalogue read helpers used by the shop listing and order displays."""

from protean.utils.globals import current_domain

from storefront.catalogue.product import Product


def list_products(search=None, category=None):
    """Return catalogue products, optionally filtered by name and category.

    The name match is a case-insensitive substring search.
    """
    repo = current_domain.repository_for(Product)
    if category:
        products = repo._dao.query.filter(category=category).all().items
    else:
        products = repo._dao.query.all().items

    if search:
        needle = search.lower()
        products = [p for p in products if needle in (p.name or "").lower()]

    return sorted(products, key=lambda p: p.created_at or 0, reverse=True)


def product_names(product_ids):
    """Map product ids to names, skipping products that no longer exist."""
    ids = {str(pid) for pid in product_ids}
    if not ids:
        return {}

    products = current_domain.repository_for(Product)._dao.query.filter(id__in=list(ids)).all().items
    return {str(p.id): p.name for p in products}
