"""Cart aggregate — the shopper's candidate purchase lines before an order exists.

The cart lives with the shopper's session and is never stored in the
database. It is hydrated from and flushed to a per-user cache (see
``storefront.cart.cache``). Every line remembers the stock seen when the
product was added, and quantities never exceed that ceiling.
"""

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import HasMany, Identifier, Integer, String

from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    name = String(max_length=255)
    unit_price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    stock = Integer(required=True, min_value=0)

    @property
    def subtotal(self):
        return self.unit_price * self.quantity


@storefront.aggregate
class Cart:
    owner_id = Identifier(required=True)
    lines = HasMany(CartLine)

    @invariant.post
    def quantities_must_not_exceed_stock(self):
        for line in self.lines or []:
            if line.quantity > line.stock:
                raise ValidationError({"quantity": [f"Only {line.stock} of {line.name or line.product_id} in stock"]})

    @property
    def total(self):
        return sum(line.subtotal for line in self.lines or [])

    @property
    def is_empty(self):
        return not self.lines

    def line_for(self, product_id):
        return next((line for line in self.lines or [] if str(line.product_id) == str(product_id)), None)

    def add(self, product, quantity=1):
        """Merge ``quantity`` units of ``product`` into the cart.

        Requests beyond the available stock are capped, and adding to a line
        already at the ceiling does nothing. Returns True when the cart changed.
        """
        if quantity is None or quantity < 1:
            return False

        stock = product.stock or 0
        existing = self.line_for(product.id)

        if existing:
            if existing.quantity >= stock:
                return False
            existing.stock = stock
            existing.quantity = min(existing.quantity + quantity, stock)
            return True

        if stock <= 0:
            return False

        self.add_lines(
            CartLine(
                product_id=str(product.id),
                name=product.name,
                unit_price=product.price,
                quantity=min(quantity, stock),
                stock=stock,
            )
        )
        return True

    def increase(self, product_id):
        line = self.line_for(product_id)
        if line is None or line.quantity >= line.stock:
            return False
        line.quantity += 1
        return True

    def decrease(self, product_id):
        """Take one unit off a line, dropping the line when it reaches zero."""
        line = self.line_for(product_id)
        if line is None:
            return False
        if line.quantity <= 1:
            self.remove_lines(line)
        else:
            line.quantity -= 1
        return True

    def clear(self):
        for line in list(self.lines or []):
            self.remove_lines(line)

    def set_all(self, items):
        """Replace the whole cart with ``items`` (dicts as produced by ``to_snapshot``)."""
        with atomic_change(self):
            self.clear()
            for item in items:
                self.add_lines(
                    CartLine(
                        product_id=str(item["product_id"]),
                        name=item.get("name"),
                        unit_price=item["unit_price"],
                        quantity=item["quantity"],
                        stock=item["stock"],
                    )
                )

    def to_snapshot(self):
        return [
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "stock": line.stock,
            }
            for line in self.lines or []
        ]
