"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """An admin added a product to the catalogue."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Integer(required=True)
    stock = Integer(required=True)
    category = String()
    image_url = String()
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUpdated:
    """An admin edited a product's details."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Integer(required=True)
    stock = Integer(required=True)
    category = String()
    image_url = String()
    updated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """A sale or a cancellation moved the product's stock count."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    requested_delta = Integer(required=True)
    reason = String(required=True)
    adjusted_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRemoved:
    """An admin deleted the product. Historical order lines keep their reference."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    removed_at = DateTime(required=True)
