"""Product aggregate — a catalogue entry and its available-to-sell stock count.

Prices are integer minor currency units. Stock is the only hot shared
counter in the storefront: checkout withdraws from it and cancellation
restores it, both relative to the value read at that moment.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from storefront.catalogue.events import ProductAdded, ProductRemoved, ProductUpdated, StockAdjusted
from storefront.domain import storefront

_UNSET = object()


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Integer(required=True, min_value=0)
    stock = Integer(default=0, min_value=0)
    category = String(max_length=100)
    image_url = String(max_length=1000)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def add(cls, name, price, stock=0, category=None, image_url=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=price,
            stock=stock,
            category=category,
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                stock=product.stock,
                category=product.category,
                image_url=product.image_url,
                added_at=now,
            )
        )
        return product

    def update_details(self, name=_UNSET, price=_UNSET, stock=_UNSET, category=_UNSET, image_url=_UNSET):
        """Apply an admin edit. Only the supplied fields change."""
        if name is not _UNSET:
            self.name = name
        if price is not _UNSET:
            self.price = price
        if stock is not _UNSET:
            self.stock = stock
        if category is not _UNSET:
            self.category = category
        if image_url is not _UNSET:
            self.image_url = image_url

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                stock=self.stock,
                category=self.category,
                image_url=self.image_url,
                updated_at=now,
            )
        )

    def withdraw(self, quantity, reason="sale"):
        """Take sold units out of stock, flooring the result at zero.

        Concurrent sales may already have consumed the units, so a request
        larger than the current stock is clamped instead of rejected.
        """
        self._adjust(-self._positive(quantity), reason)

    def restock(self, quantity, reason="cancellation"):
        """Return units to stock."""
        self._adjust(self._positive(quantity), reason)

    def remove(self):
        self.raise_(
            ProductRemoved(
                product_id=str(self.id),
                removed_at=datetime.now(UTC),
            )
        )

    @staticmethod
    def _positive(quantity):
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        return quantity

    def _adjust(self, delta, reason):
        previous = self.stock or 0
        self.stock = max(previous + delta, 0)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=self.stock,
                requested_delta=delta,
                reason=reason,
                adjusted_at=now,
            )
        )
