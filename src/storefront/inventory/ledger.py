"""Inventory ledger — the authoritative per-product stock counter.

Checkout withdraws sold units after payment succeeds and the cancellation
workflow restores them after a refund. Both are read-modify-write updates
relative to the stock read at that moment, written with a zero floor.

Within one process the read-modify-write for a product is serialised with a
keyed lock. Writers in other processes can still interleave, in which case
the clamp keeps the persisted stock non-negative even if an over-sell slips
through.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)

_lock_for = KeyedLocks()


class InventoryLedger:
    """Adjusts Product.stock one product at a time."""

    def stock_of(self, product_id) -> int | None:
        try:
            return current_domain.repository_for(Product).get(str(product_id)).stock
        except ObjectNotFoundError:
            return None

    def withdraw(self, product_id, quantity, reason="sale") -> int | None:
        """Remove sold units, writing ``max(stock - quantity, 0)``.

        Returns the new stock, or None when the product no longer exists.
        """
        return self._apply(product_id, quantity, reason, withdrawing=True)

    def restore(self, product_id, quantity, reason="cancellation") -> int | None:
        """Put units back, writing ``stock + quantity``.

        Returns the new stock, or None when the product no longer exists.
        """
        return self._apply(product_id, quantity, reason, withdrawing=False)

    def _apply(self, product_id, quantity, reason, withdrawing):
        with _lock_for(product_id):
            repo = current_domain.repository_for(Product)
            try:
                product = repo.get(str(product_id))
            except ObjectNotFoundError:
                logger.warning(
                    "Stock adjustment skipped, product not found",
                    product_id=str(product_id),
                    quantity=quantity,
                    reason=reason,
                )
                return None

            if withdrawing:
                product.withdraw(quantity, reason=reason)
            else:
                product.restock(quantity, reason=reason)
            repo.add(product)

        logger.info(
            "Stock adjusted",
            product_id=str(product_id),
            quantity=quantity,
            reason=reason,
            new_stock=product.stock,
        )
        return product.stock
