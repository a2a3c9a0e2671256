"""In-memory record store adapter."""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from tasktally.core.tasks import parse_timestamp
from tasktally.errors import StoreError
from tasktally.ports.record_store import NOTIFICATIONS, TASKS, Filter, Order


def _comparable(value: Any) -> Any:
    """Compare timestamp strings as instants rather than text."""
    if isinstance(value, str) and "T" in value:
        try:
            return parse_timestamp(value)
        except ValueError:
            return value
    return value


def matches(record: dict, f: Filter) -> bool:
    actual = record.get(f.field)
    if f.op == "eq":
        return actual == f.value
    if actual is None:
        return False
    if f.op == "gte":
        return _comparable(actual) >= _comparable(f.value)
    return _comparable(actual) <= _comparable(f.value)


class MemoryRecordStore:
    """
    Dict-backed record store.

    Implements RecordStore protocol. Records are copied on the way in and
    out so callers never share state with the store.
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = {TASKS: [], NOTIFICATIONS: []}
        if tables:
            for name, rows in tables.items():
                self.tables[name] = copy.deepcopy(rows)

    def _table(self, table: str) -> list[dict]:
        if table not in self.tables:
            raise StoreError(f"Unknown table: {table}")
        return self.tables[table]

    def _commit(self, table: str, rows: list[dict]) -> None:
        """Persist a table's new rows. Hook for persistent subclasses."""
        pass

    def _swap(self, table: str, rows: list[dict]) -> None:
        # Only a committed table replaces the current one
        self._commit(table, rows)
        self.tables[table] = rows

    def select(
        self,
        table: str,
        filters: Iterable[Filter] = (),
        order: Order | None = None,
    ) -> list[dict]:
        filters = list(filters)
        rows = [r for r in self._table(table) if all(matches(r, f) for f in filters)]
        if order:
            present = [r for r in rows if r.get(order.field) is not None]
            missing = [r for r in rows if r.get(order.field) is None]
            present.sort(key=lambda r: _comparable(r[order.field]), reverse=order.descending)
            rows = present + missing
        return copy.deepcopy(rows)

    def insert(self, table: str, record: dict) -> dict:
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        if not row.get("created_at"):
            row["created_at"] = datetime.now(timezone.utc).isoformat()
        self._swap(table, self._table(table) + [row])
        return copy.deepcopy(row)

    def update(self, table: str, patch: dict, filters: Iterable[Filter]) -> int:
        filters = list(filters)
        rows = []
        count = 0
        for row in self._table(table):
            if all(matches(row, f) for f in filters):
                row = {**row, **patch}
                count += 1
            rows.append(row)
        if count:
            self._swap(table, rows)
        return count

    def delete(self, table: str, filters: Iterable[Filter]) -> int:
        filters = list(filters)
        rows = self._table(table)
        kept = [r for r in rows if not all(matches(r, f) for f in filters)]
        count = len(rows) - len(kept)
        if count:
            self._swap(table, kept)
        return count
