"""Task ledger - one user's tasks, cached over the record store.

The store is authoritative. Single-record mutations hit the store first and
only then touch the cache, so a failure leaves the cache as it was. Reorder
is the exception: it renumbers the cache up front and, if any position write
fails, reloads the whole partition from the store. After such a failure
the cache counts as unloaded, so the next read does a full load even if
the partition reload fails too.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Iterable

from .core.tasks import (
    DateTasks,
    NotificationType,
    Partition,
    Task,
    clean_title,
    format_timestamp,
    next_position,
    partition_members,
    progress,
    renumber,
    tasks_on_date,
    view_history,
    view_recurring,
    view_today,
)
from .errors import AuthenticationError, NotFoundError, StoreError
from .notifications import NotificationCenter
from .ports.record_store import TASKS, Order, RecordStore, eq
from .ports.session import SessionProvider

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskLedger:
    """Mutations and derived views over a signed-in user's tasks."""

    def __init__(
        self,
        store: RecordStore,
        session: SessionProvider,
        notifications: NotificationCenter | None = None,
        tz: tzinfo = timezone.utc,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.session = session
        self.notifications = notifications or NotificationCenter(store, session, now=now)
        self.tz = tz
        self.now = now
        self._tasks: list[Task] = []
        self.loaded = False

    def _owner(self) -> str:
        user_id = self.session.current_user_id()
        if not user_id:
            raise AuthenticationError("Not signed in")
        return user_id

    def _fetch(self, *extra) -> list[Task]:
        rows = self.store.select(
            TASKS,
            [eq("user_id", self._owner()), *extra],
            Order("position"),
        )
        return [Task.from_record(r) for r in rows]

    def _ensure_loaded(self) -> None:
        if not self.loaded:
            self.load()

    def load(self) -> list[Task]:
        """Replace the cache with a fresh read of every task."""
        self._tasks = self._fetch()
        self.loaded = True
        return self.tasks

    def reload_partition(self, partition: Partition) -> None:
        """Discard cached tasks of one partition and re-read them from the store."""
        fresh = self._fetch(eq("recurring", partition.recurring))
        others = [t for t in self._tasks if t.recurring != partition.recurring]
        self._tasks = others + fresh

    @property
    def tasks(self) -> list[Task]:
        self._ensure_loaded()
        return list(self._tasks)

    def get(self, task_id: str) -> Task:
        self._ensure_loaded()
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise NotFoundError(f"No task with id {task_id}")

    def _replace(self, updated: Task) -> None:
        self._tasks = [updated if t.id == updated.id else t for t in self._tasks]

    # ============== Mutations ==============

    def add_task(self, title: str, recurring: bool = False) -> Task:
        """Append a new task to the end of its partition."""
        title = clean_title(title)
        owner = self._owner()
        self._ensure_loaded()

        record = {
            "user_id": owner,
            "title": title,
            "completed": False,
            "recurring": recurring,
            "created_at": format_timestamp(self.now()),
            "completed_at": None,
            "position": next_position(self._tasks, recurring),
        }
        task = Task.from_record(self.store.insert(TASKS, record))
        self._tasks.append(task)

        kind = "Recurring task" if recurring else "Task"
        self.notifications.notify(
            f"{kind} created",
            f'"{task.title}" has been added to your list.',
            NotificationType.INFO,
        )
        return task

    def toggle_task(self, task_id: str) -> Task:
        """Flip completion. Only completing a task emits a notification."""
        task = self.get(task_id)
        updated = task.toggled(self.now())

        count = self.store.update(
            TASKS,
            {
                "completed": updated.completed,
                "completed_at": format_timestamp(updated.completed_at),
            },
            [eq("id", task_id), eq("user_id", self._owner())],
        )
        if not count:
            raise NotFoundError(f"No task with id {task_id}")
        self._replace(updated)

        if updated.completed:
            self.notifications.notify(
                "Task completed",
                f'Great job! You completed "{updated.title}".',
                NotificationType.SUCCESS,
            )
        return updated

    def delete_task(self, task_id: str) -> None:
        """Remove a task from both the active list and history."""
        task = self.get(task_id)

        count = self.store.delete(TASKS, [eq("id", task_id), eq("user_id", self._owner())])
        if not count:
            raise NotFoundError(f"No task with id {task_id}")
        self._tasks = [t for t in self._tasks if t.id != task_id]

        self.notifications.notify(
            "Task deleted",
            f'"{task.title}" has been removed.',
            NotificationType.WARNING,
        )

    def reorder(self, partition: Partition, ordered_ids: Iterable[str]) -> None:
        """
        Renumber a partition densely in the given order.

        Applied to the cache before the store confirms. Writes are one per
        moved task and not atomic; on the first failure the partition is
        reloaded from the store and StoreError is raised.
        """
        self._ensure_loaded()
        positions = renumber(self._tasks, partition, list(ordered_ids))
        owner = self._owner()

        moved = [t for t in partition_members(self._tasks, partition) if t.position != positions[t.id]]
        self._tasks = [
            replace(t, position=positions[t.id]) if t.id in positions else t for t in self._tasks
        ]

        for task in moved:
            try:
                count = self.store.update(
                    TASKS,
                    {"position": positions[task.id]},
                    [eq("id", task.id), eq("user_id", owner)],
                )
            except StoreError as e:
                logger.warning(f"Reorder of {partition.value} tasks failed, reloading: {e}")
                self.loaded = False
                self.reload_partition(partition)
                raise StoreError(f"Could not save new order: {e}") from e
            if not count:
                logger.warning(f"Task {task.id} vanished during reorder, reloading {partition.value} tasks")
                self.loaded = False
                self.reload_partition(partition)
                raise StoreError(f"Could not save new order: task {task.id} no longer exists")

    # ============== Views ==============

    def view_today(self) -> list[Task]:
        return view_today(self.tasks)

    def view_recurring(self) -> list[Task]:
        return view_recurring(self.tasks)

    def view_history(self) -> list[Task]:
        return view_history(self.tasks)

    def tasks_on_date(self, day: date) -> DateTasks:
        return tasks_on_date(self.tasks, day, self.tz)

    def progress(self) -> int:
        return progress(self.tasks)
