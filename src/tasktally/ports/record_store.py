"""Record store interface."""

from dataclasses import dataclass
from typing import Any, Iterable, Protocol

TASKS = "tasks"
NOTIFICATIONS = "notifications"

OPERATORS = ("eq", "gte", "lte")


@dataclass(frozen=True)
class Filter:
    """A single field condition: equality or inclusive range bound."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Order:
    field: str
    descending: bool = False


def eq(field: str, value: Any) -> Filter:
    return Filter(field, "eq", value)


def gte(field: str, value: Any) -> Filter:
    return Filter(field, "gte", value)


def lte(field: str, value: Any) -> Filter:
    return Filter(field, "lte", value)


class RecordStore(Protocol):
    """Interface for any backend holding the tasks and notifications tables.

    Every method raises StoreError when the backend fails.
    """

    def select(
        self,
        table: str,
        filters: Iterable[Filter] = (),
        order: Order | None = None,
    ) -> list[dict]:
        """Fetch records matching all filters."""
        ...

    def insert(self, table: str, record: dict) -> dict:
        """Insert a record, returning it with generated fields filled in."""
        ...

    def update(self, table: str, patch: dict, filters: Iterable[Filter]) -> int:
        """Apply patch to matching records. Returns rows affected."""
        ...

    def delete(self, table: str, filters: Iterable[Filter]) -> int:
        """Delete matching records. Returns rows affected."""
        ...
