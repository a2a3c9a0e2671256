"""Pure scoring and reporting logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from .tasks import Task, round_half_up

# Fixed reference caps used to scale raw scores to 0-100.
WEEKLY_REFERENCE_CAP = 50
MONTHLY_REFERENCE_CAP = 200

RECURRING_POINTS = 2
ONE_OFF_POINTS = 1


@dataclass
class DateRange:
    """A closed [start, end] interval."""

    start: datetime
    end: datetime

    def contains(self, dt: datetime) -> bool:
        return self.start <= dt <= self.end

    def format(self) -> str:
        return f"{self.start.strftime('%b %d')} - {self.end.strftime('%b %d, %Y')}"


@dataclass
class Score:
    completed_count: int = 0
    score: int = 0


@dataclass
class WeekScore:
    """Score for one week of a monthly breakdown."""

    week_number: int
    completed_count: int
    score: int
    date_range: DateRange


def task_points(task: Task) -> int:
    return RECURRING_POINTS if task.recurring else ONE_OFF_POINTS


def aggregate(tasks: list[Task], start: datetime, end: datetime) -> Score:
    """
    Count completed tasks in [start, end] and sum their points.

    Recurring tasks are worth 2 points, one-off tasks 1. Pure function - no I/O.
    """
    window = DateRange(start, end)
    done = [t for t in tasks if t.completed and t.completed_at and window.contains(t.completed_at)]
    return Score(completed_count=len(done), score=sum(task_points(t) for t in done))


def normalize(score: float, max_for_period: float) -> int:
    """Scale a raw score against a reference cap, clamped to 0-100."""
    if max_for_period <= 0:
        raise ValueError(f"Reference cap must be positive, got {max_for_period}")
    return max(0, round_half_up(min(100, score / max_for_period * 100)))


def _start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def _end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max, tzinfo=moment.tzinfo)


def week_window(moment: datetime) -> DateRange:
    """The Monday-start week containing moment."""
    monday = _start_of_day(moment) - timedelta(days=moment.weekday())
    return DateRange(monday, _end_of_day(monday + timedelta(days=6)))


def month_window(moment: datetime) -> DateRange:
    """The calendar month containing moment."""
    first = _start_of_day(moment.replace(day=1))
    next_month = (first + timedelta(days=32)).replace(day=1)
    return DateRange(first, _end_of_day(next_month - timedelta(days=1)))


def weekly_breakdown(
    tasks: list[Task],
    month_start: datetime,
    week_count: int = 4,
) -> list[WeekScore]:
    """
    Score each of week_count consecutive weeks starting at month_start.

    Week i starts at month_start + i weeks and runs to the end of the
    Monday-start week containing that start. Windows are not clipped to
    the calendar month, so trailing days can spill over or be missed.
    """
    weeks = []
    for i in range(week_count):
        start = _start_of_day(month_start + timedelta(weeks=i))
        window = DateRange(start, week_window(start).end)
        result = aggregate(tasks, window.start, window.end)
        weeks.append(
            WeekScore(
                week_number=i + 1,
                completed_count=result.completed_count,
                score=result.score,
                date_range=window,
            )
        )
    return weeks
