"""Notification feed for task events."""

import logging
from datetime import datetime, timezone
from typing import Callable

from .core.tasks import Notification, NotificationType, format_timestamp
from .errors import AuthenticationError, NotFoundError, StoreError
from .ports.record_store import NOTIFICATIONS, Order, RecordStore, eq
from .ports.session import SessionProvider

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationCenter:
    """Creates and manages one user's notifications."""

    def __init__(
        self,
        store: RecordStore,
        session: SessionProvider,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.session = session
        self.now = now

    def _owner(self) -> str:
        user_id = self.session.current_user_id()
        if not user_id:
            raise AuthenticationError("Not signed in")
        return user_id

    def notify(self, title: str, message: str, kind: NotificationType) -> Notification | None:
        """Record a notification. Failures are logged, never raised."""
        record = {
            "user_id": self._owner(),
            "title": title,
            "message": message,
            "type": kind.value,
            "read": False,
            "created_at": format_timestamp(self.now()),
        }
        try:
            return Notification.from_record(self.store.insert(NOTIFICATIONS, record))
        except StoreError as e:
            logger.warning(f"Could not record notification {title!r}: {e}")
            return None

    def fetch(self) -> list[Notification]:
        """Newest first. Degrades to an empty list if the store is unavailable."""
        owner = self._owner()
        try:
            rows = self.store.select(
                NOTIFICATIONS,
                [eq("user_id", owner)],
                Order("created_at", descending=True),
            )
        except StoreError as e:
            logger.warning(f"Failed to fetch notifications: {e}")
            return []
        return [Notification.from_record(r) for r in rows]

    def unread_count(self) -> int:
        return sum(1 for n in self.fetch() if not n.read)

    def mark_read(self, notification_id: str) -> None:
        count = self.store.update(
            NOTIFICATIONS,
            {"read": True},
            [eq("id", notification_id), eq("user_id", self._owner())],
        )
        if not count:
            raise NotFoundError(f"No notification with id {notification_id}")

    def delete(self, notification_id: str) -> None:
        count = self.store.delete(
            NOTIFICATIONS,
            [eq("id", notification_id), eq("user_id", self._owner())],
        )
        if not count:
            raise NotFoundError(f"No notification with id {notification_id}")

    def clear_all(self) -> int:
        """Delete every notification. Returns how many were removed."""
        return self.store.delete(NOTIFICATIONS, [eq("user_id", self._owner())])
