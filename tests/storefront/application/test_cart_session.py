"""Tests for cart sessions and the per-user cart cache."""

from storefront.cart.cache import FileCartCache, MemoryCartCache, get_cart_cache, reset_cart_cache
from storefront.cart.session import CartSession
from storefront.catalogue.product import Product


def _product(name="Kopi Susu", price=10000, stock=5):
    return Product(name=name, price=price, stock=stock)


class TestMemoryBackedSession:
    def test_changes_survive_a_new_session(self):
        cache = MemoryCartCache()
        product = _product()
        session = CartSession("user-001", cache)
        session.add(product, 2)
        session.increase(product.id)

        reloaded = CartSession("user-001", cache)
        assert reloaded.lines[0].quantity == 3
        assert reloaded.total == 30000

    def test_carts_do_not_cross_users(self):
        cache = MemoryCartCache()
        CartSession("user-001", cache).add(_product())
        assert CartSession("user-002", cache).is_empty

    def test_clear_discards_cached_cart(self):
        cache = MemoryCartCache()
        session = CartSession("user-001", cache)
        session.add(_product())
        session.clear()
        assert cache.load("user-001") == []

    def test_rejected_add_does_not_write(self):
        cache = MemoryCartCache()
        session = CartSession("user-001", cache)
        assert session.add(_product(stock=0)) is False
        assert cache.load("user-001") == []


class TestFileCartCache:
    def test_round_trip(self, tmp_path):
        cache = FileCartCache(tmp_path)
        product = _product()
        CartSession("user-001", cache).add(product, 2)

        reloaded = CartSession("user-001", FileCartCache(tmp_path))
        assert reloaded.lines[0].product_id == str(product.id)
        assert reloaded.lines[0].quantity == 2

    def test_unreadable_file_is_ignored(self, tmp_path):
        cache = FileCartCache(tmp_path)
        cache._path("user-001").write_text("{not json", encoding="utf-8")
        assert cache.load("user-001") == []

    def test_discard_missing_file(self, tmp_path):
        FileCartCache(tmp_path).discard("nobody")


class TestFactory:
    def test_defaults_to_memory(self, monkeypatch):
        monkeypatch.delenv("CART_CACHE_DIR", raising=False)
        reset_cart_cache()
        assert isinstance(get_cart_cache(), MemoryCartCache)

    def test_file_cache_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CART_CACHE_DIR", str(tmp_path))
        reset_cart_cache()
        assert isinstance(get_cart_cache(), FileCartCache)
