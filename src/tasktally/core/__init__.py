"""Functional core - pure business logic with no I/O."""

from .tasks import (
    DateTasks,
    Notification,
    NotificationType,
    Partition,
    Task,
    progress,
    tasks_on_date,
    view_history,
    view_recurring,
    view_today,
)
from .scoring import (
    MONTHLY_REFERENCE_CAP,
    WEEKLY_REFERENCE_CAP,
    DateRange,
    Score,
    WeekScore,
    aggregate,
    month_window,
    normalize,
    week_window,
    weekly_breakdown,
)

__all__ = [
    # Tasks
    "Task",
    "Partition",
    "DateTasks",
    "view_today",
    "view_recurring",
    "view_history",
    "tasks_on_date",
    "progress",
    # Notifications
    "Notification",
    "NotificationType",
    # Scoring
    "DateRange",
    "Score",
    "WeekScore",
    "aggregate",
    "normalize",
    "week_window",
    "month_window",
    "weekly_breakdown",
    "WEEKLY_REFERENCE_CAP",
    "MONTHLY_REFERENCE_CAP",
]
