"""A shopper's cart bound to its cache: hydrated on open, flushed on every change."""

import structlog

from storefront.cart.cache import CartCache, get_cart_cache
from storefront.cart.cart import Cart

logger = structlog.get_logger(__name__)


class CartSession:
    def __init__(self, owner_id, cache: CartCache | None = None) -> None:
        if not owner_id:
            raise ValueError("A cart session needs an owner")
        self.owner_id = str(owner_id)
        self.cache = cache or get_cart_cache()
        self.cart = Cart(owner_id=self.owner_id)
        self.cart.set_all(self.cache.load(self.owner_id))

    @property
    def lines(self):
        return self.cart.lines

    @property
    def total(self):
        return self.cart.total

    @property
    def is_empty(self):
        return self.cart.is_empty

    def add(self, product, quantity=1):
        return self._flush_if(self.cart.add(product, quantity))

    def increase(self, product_id):
        return self._flush_if(self.cart.increase(product_id))

    def decrease(self, product_id):
        return self._flush_if(self.cart.decrease(product_id))

    def set_all(self, items):
        self.cart.set_all(items)
        self._flush()

    def clear(self):
        self.cart.clear()
        self.cache.discard(self.owner_id)
        logger.debug("Cart cleared", owner_id=self.owner_id)

    def _flush_if(self, changed):
        if changed:
            self._flush()
        return changed

    def _flush(self):
        self.cache.save(self.owner_id, self.cart.to_snapshot())
