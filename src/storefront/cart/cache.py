"""Per-user cart cache.

Carts are kept per identity so they survive reloads without ever crossing
users. Two backends:
- MemoryCartCache for development and testing
- FileCartCache, one JSON document per user under ``CART_CACHE_DIR``
"""

import hashlib
import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class CartCache(ABC):
    """Abstract keyed store of cart snapshots."""

    @abstractmethod
    def load(self, owner_id: str) -> list[dict]:
        """Return the cached cart lines for ``owner_id`` (empty if none)."""
        ...

    @abstractmethod
    def save(self, owner_id: str, items: list[dict]) -> None:
        ...

    @abstractmethod
    def discard(self, owner_id: str) -> None:
        ...


class MemoryCartCache(CartCache):
    def __init__(self) -> None:
        self._carts: dict[str, list[dict]] = {}
        self._lock = threading.Lock()

    def load(self, owner_id: str) -> list[dict]:
        with self._lock:
            return [dict(item) for item in self._carts.get(str(owner_id), [])]

    def save(self, owner_id: str, items: list[dict]) -> None:
        with self._lock:
            self._carts[str(owner_id)] = [dict(item) for item in items]

    def discard(self, owner_id: str) -> None:
        with self._lock:
            self._carts.pop(str(owner_id), None)


class FileCartCache(CartCache):
    """Stores each user's cart as ``<sha256(owner_id)>.json`` under ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, owner_id: str) -> Path:
        digest = hashlib.sha256(str(owner_id).encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.json"

    def load(self, owner_id: str) -> list[dict]:
        path = self._path(owner_id)
        if not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Discarding unreadable cart cache", owner_id=str(owner_id), error=str(exc))
            return []
        if payload.get("owner_id") != str(owner_id):
            return []
        return payload.get("items", [])

    def save(self, owner_id: str, items: list[dict]) -> None:
        path = self._path(owner_id)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"owner_id": str(owner_id), "items": items}), encoding="utf-8")
        tmp.replace(path)

    def discard(self, owner_id: str) -> None:
        self._path(owner_id).unlink(missing_ok=True)


_current_cache: CartCache | None = None


def get_cart_cache() -> CartCache:
    """Return the active cart cache.

    Uses FileCartCache when ``CART_CACHE_DIR`` is set, otherwise an
    in-memory cache.
    """
    global _current_cache
    if _current_cache is None:
        directory = os.environ.get("CART_CACHE_DIR")
        _current_cache = FileCartCache(directory) if directory else MemoryCartCache()
    return _current_cache


def set_cart_cache(cache: CartCache) -> None:
    global _current_cache
    _current_cache = cache


def reset_cart_cache() -> None:
    global _current_cache
    _current_cache = None
