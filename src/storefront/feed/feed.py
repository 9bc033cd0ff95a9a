"""Change feed — pushes committed row mutations to live subscribers.

Subscriptions are keyed by table and optionally narrowed by a row filter,
either a dict of column values (``{"owner_id": "u-1"}``) or a predicate.
Events are published after the unit of work that produced them commits.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

import structlog

logger = structlog.get_logger(__name__)


class ChangeKind(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind
    row: dict
    committed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


RowFilter = dict | Callable[[dict], bool] | None


def _matches(row_filter: RowFilter, row: dict) -> bool:
    if row_filter is None:
        return True
    if callable(row_filter):
        return bool(row_filter(row))
    return all(str(row.get(key)) == str(value) for key, value in row_filter.items())


@dataclass
class Subscription:
    table: str
    callback: Callable[[ChangeEvent], None]
    row_filter: RowFilter = None
    feed: "ChangeFeed | None" = None
    id: str = field(default_factory=lambda: uuid4().hex)

    def unsubscribe(self) -> None:
        if self.feed is not None:
            self.feed.unsubscribe(self)
            self.feed = None


class ChangeFeed:
    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def subscribe(self, table: str, callback: Callable[[ChangeEvent], None], row_filter: RowFilter = None):
        subscription = Subscription(table=table, callback=callback, row_filter=row_filter, feed=self)
        with self._lock:
            self._subscriptions[subscription.id] = subscription
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions.pop(subscription.id, None)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver ``event`` to matching subscribers. Returns the delivery count.

        A failing subscriber is logged and does not stop delivery to the rest.
        """
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.table == event.table]

        delivered = 0
        for subscription in targets:
            if not _matches(subscription.row_filter, event.row):
                continue
            try:
                subscription.callback(event)
                delivered += 1
            except Exception as exc:
                logger.error(
                    "Change feed subscriber failed",
                    table=event.table,
                    kind=event.kind.value,
                    row_id=event.row.get("id"),
                    error=str(exc),
                )
        return delivered

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


_current_feed: ChangeFeed | None = None


def get_feed() -> ChangeFeed:
    global _current_feed
    if _current_feed is None:
        _current_feed = ChangeFeed()
    return _current_feed


def reset_feed() -> None:
    global _current_feed
    _current_feed = None
