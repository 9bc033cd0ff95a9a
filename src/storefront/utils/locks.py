"""In-process keyed locks."""

import threading
from contextlib import contextmanager


class KeyedLocks:
    """Hands out one lock per key, e.g. per product id or per order id.

    A key's lock lives only while some thread holds or waits on it, so the
    table stays as small as the number of keys in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextmanager
    def __call__(self, key):
        key = str(key)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1

        try:
            with lock:
                yield lock
        finally:
            with self._guard:
                self._waiters[key] -= 1
                if not self._waiters[key]:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
