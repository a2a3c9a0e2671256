"""Ports - interfaces/protocols for external dependencies."""

from .record_store import RecordStore, Filter, Order, eq, gte, lte, TASKS, NOTIFICATIONS
from .session import SessionProvider

__all__ = [
    "RecordStore",
    "Filter",
    "Order",
    "eq",
    "gte",
    "lte",
    "TASKS",
    "NOTIFICATIONS",
    "SessionProvider",
]
