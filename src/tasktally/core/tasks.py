"""Pure task domain logic - no I/O dependencies."""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone, tzinfo
from enum import Enum

from tasktally.errors import ValidationError


class Partition(Enum):
    """Independently ordered subsets of a user's tasks."""

    ACTIVE = "active"
    RECURRING = "recurring"

    @property
    def recurring(self) -> bool:
        return self is Partition.RECURRING


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from the store into an aware datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


@dataclass
class Task:
    """A one-off or daily recurring task owned by a single user."""

    id: str
    title: str
    owner_id: str
    created_at: datetime
    completed: bool = False
    recurring: bool = False
    completed_at: datetime | None = None
    position: int = 0

    @property
    def partition(self) -> Partition:
        return Partition.RECURRING if self.recurring else Partition.ACTIVE

    def is_active(self) -> bool:
        """Shown on the active list: not recurring and not yet done."""
        return not self.recurring and not self.completed

    def toggled(self, now: datetime) -> "Task":
        """Return a copy with completion flipped and completed_at kept in step."""
        if self.completed:
            return replace(self, completed=False, completed_at=None)
        return replace(self, completed=True, completed_at=now)

    def local_created_date(self, tz: tzinfo) -> date | None:
        if not self.created_at:
            return None
        return self.created_at.astimezone(tz).date()

    def local_completed_date(self, tz: tzinfo) -> date | None:
        if not self.completed_at:
            return None
        return self.completed_at.astimezone(tz).date()

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        """Create Task from a store record."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            owner_id=data.get("user_id", ""),
            created_at=parse_timestamp(data.get("created_at")),
            completed=bool(data.get("completed", False)),
            recurring=bool(data.get("recurring", False)),
            completed_at=parse_timestamp(data.get("completed_at")),
            position=data.get("position") or 0,
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.owner_id,
            "title": self.title,
            "completed": self.completed,
            "recurring": self.recurring,
            "created_at": format_timestamp(self.created_at),
            "completed_at": format_timestamp(self.completed_at),
            "position": self.position,
        }


class NotificationType(Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Notification:
    """A record of something that happened to a user's tasks."""

    id: str
    owner_id: str
    title: str
    message: str
    type: NotificationType
    timestamp: datetime
    read: bool = False

    @classmethod
    def from_record(cls, data: dict) -> "Notification":
        return cls(
            id=str(data["id"]),
            owner_id=data.get("user_id", ""),
            title=data["title"],
            message=data.get("message", ""),
            type=NotificationType(data.get("type", "info")),
            timestamp=parse_timestamp(data.get("created_at")),
            read=bool(data.get("read", False)),
        )


@dataclass
class DateTasks:
    """Tasks created and completed on one calendar day."""

    day: date
    created: list[Task] = field(default_factory=list)
    completed: list[Task] = field(default_factory=list)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (33.5 -> 34)."""
    return int(math.floor(value + 0.5))


def clean_title(title: str) -> str:
    """Trim a title, rejecting blank ones."""
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Task title cannot be empty")
    return cleaned


def next_position(tasks: list[Task], recurring: bool) -> int:
    """Position for a new task appended to the end of its partition."""
    positions = [t.position for t in tasks if t.recurring == recurring]
    return max(positions) + 1 if positions else 0


def partition_members(tasks: list[Task], partition: Partition) -> list[Task]:
    """Tasks that can be reordered within a partition."""
    if partition is Partition.RECURRING:
        return [t for t in tasks if t.recurring]
    return [t for t in tasks if t.is_active()]


def renumber(tasks: list[Task], partition: Partition, ordered_ids: list[str]) -> dict[str, int]:
    """
    Map each id of the partition to its new dense position.

    Raises ValidationError unless ordered_ids is a permutation of the
    partition's current ids. Pure function - no I/O.
    """
    current = [t.id for t in partition_members(tasks, partition)]
    if len(ordered_ids) != len(current) or set(ordered_ids) != set(current):
        raise ValidationError(
            f"Reorder of {partition.value} tasks must list each of its {len(current)} tasks exactly once"
        )
    return {task_id: index for index, task_id in enumerate(ordered_ids)}


def sort_by_position(tasks: list[Task]) -> list[Task]:
    """Ascending position; equal positions keep their incoming order."""
    return sorted(tasks, key=lambda t: t.position)


def view_today(tasks: list[Task]) -> list[Task]:
    """Active one-off tasks plus every recurring task, by position."""
    return sort_by_position([t for t in tasks if t.recurring or not t.completed])


def view_recurring(tasks: list[Task]) -> list[Task]:
    return sort_by_position([t for t in tasks if t.recurring])


def view_history(tasks: list[Task]) -> list[Task]:
    """Completed tasks, most recently completed first."""
    done = [t for t in tasks if t.completed and t.completed_at]
    return sorted(done, key=lambda t: t.completed_at, reverse=True)


def tasks_on_date(tasks: list[Task], day: date, tz: tzinfo) -> DateTasks:
    """
    Split tasks into those created and those completed on a calendar day.

    Dates are compared in the viewer's timezone, not UTC.
    """
    return DateTasks(
        day=day,
        created=[t for t in tasks if t.local_created_date(tz) == day],
        completed=[t for t in view_history(tasks) if t.local_completed_date(tz) == day],
    )


def progress(tasks: list[Task]) -> int:
    """Percentage of today's tasks that are completed (0 when there are none)."""
    today = view_today(tasks)
    if not today:
        return 0
    done = sum(1 for t in today if t.completed)
    return round_half_up(100 * done / len(today))
