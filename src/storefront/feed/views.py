"""Live views — local row caches kept current by the change feed.

A view starts from a query result and applies incoming changes as
last-write-wins merges keyed by row id. Admin screens that change a row
before the write is confirmed use ``update_optimistically``, which puts
the previous row back if the write fails.
"""

from datetime import datetime

from storefront.feed.feed import ChangeEvent, ChangeFeed, ChangeKind, RowFilter, get_feed


def _stamp(value):
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


class LiveView:
    def __init__(
        self,
        table: str,
        rows: list[dict] | None = None,
        row_filter: RowFilter = None,
        feed: ChangeFeed | None = None,
        key: str = "id",
    ) -> None:
        self.table = table
        self.key = key
        self._rows: dict[str, dict] = {str(row[key]): dict(row) for row in rows or []}
        self._subscription = (feed or get_feed()).subscribe(table, self.apply, row_filter)

    @property
    def rows(self) -> list[dict]:
        return list(self._rows.values())

    def get(self, row_id) -> dict | None:
        return self._rows.get(str(row_id))

    def __contains__(self, row_id) -> bool:
        return str(row_id) in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def apply(self, event: ChangeEvent) -> None:
        row_id = str(event.row[self.key])

        if event.kind == ChangeKind.DELETE:
            self._rows.pop(row_id, None)
            return

        current = self._rows.get(row_id)
        if current is None:
            self._rows[row_id] = dict(event.row)
            return

        incoming_at = _stamp(event.row.get("updated_at"))
        current_at = _stamp(current.get("updated_at"))
        if incoming_at is not None and current_at is not None and incoming_at < current_at:
            return  # Stale
        current.update(event.row)

    def update_optimistically(self, row_id, changes: dict, commit):
        """Show ``changes`` immediately, then run ``commit()``.

        If ``commit`` raises, the row is restored to what it was and the
        exception propagates.
        """
        row_id = str(row_id)
        previous = dict(self._rows[row_id]) if row_id in self._rows else None
        self._rows.setdefault(row_id, {self.key: row_id}).update(changes)
        try:
            return commit()
        except Exception:
            if previous is None:
                self._rows.pop(row_id, None)
            else:
                self._rows[row_id] = previous
            raise

    def close(self) -> None:
        self._subscription.unsubscribe()
