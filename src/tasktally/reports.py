"""Performance reports - weekly and monthly scores read from the store."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .config import Config
from .core.scoring import (
    DateRange,
    WeekScore,
    aggregate,
    month_window,
    normalize,
    week_window,
    weekly_breakdown,
)
from .core.tasks import Task
from .errors import AuthenticationError
from .ports.record_store import TASKS, Order, RecordStore, eq, gte, lte
from .ports.session import SessionProvider

logger = logging.getLogger(__name__)


@dataclass
class PeriodReport:
    """Completion stats for one week or month."""

    period: str
    date_range: DateRange
    completed_count: int
    score: int
    normalized: int


def _owner(session: SessionProvider) -> str:
    user_id = session.current_user_id()
    if not user_id:
        raise AuthenticationError("Not signed in")
    return user_id


def fetch_completed(store: RecordStore, owner: str, window: DateRange) -> list[Task]:
    """Completed tasks whose completed_at falls inside window."""
    rows = store.select(
        TASKS,
        [
            eq("user_id", owner),
            eq("completed", True),
            gte("completed_at", window.start.astimezone(timezone.utc).isoformat()),
            lte("completed_at", window.end.astimezone(timezone.utc).isoformat()),
        ],
        Order("completed_at", descending=True),
    )
    return [Task.from_record(r) for r in rows]


def _period_report(
    store: RecordStore,
    session: SessionProvider,
    period: str,
    window: DateRange,
    cap: int,
) -> PeriodReport:
    tasks = fetch_completed(store, _owner(session), window)
    result = aggregate(tasks, window.start, window.end)
    logger.debug(f"{period} report: {result.completed_count} tasks, {result.score} points")
    return PeriodReport(
        period=period,
        date_range=window,
        completed_count=result.completed_count,
        score=result.score,
        normalized=normalize(result.score, cap),
    )


def weekly_report(
    store: RecordStore,
    session: SessionProvider,
    config: Config,
    as_of: datetime | None = None,
) -> PeriodReport:
    """Stats for the Monday-start week containing as_of."""
    as_of = as_of or datetime.now(config.tz)
    return _period_report(store, session, "week", week_window(as_of), config.weekly_reference_cap)


def monthly_report(
    store: RecordStore,
    session: SessionProvider,
    config: Config,
    as_of: datetime | None = None,
) -> PeriodReport:
    """Stats for the calendar month containing as_of."""
    as_of = as_of or datetime.now(config.tz)
    return _period_report(store, session, "month", month_window(as_of), config.monthly_reference_cap)


def monthly_breakdown(
    store: RecordStore,
    session: SessionProvider,
    config: Config,
    as_of: datetime | None = None,
    week_count: int = 4,
) -> list[WeekScore]:
    """Week-by-week stats starting on the first of as_of's month."""
    as_of = as_of or datetime.now(config.tz)
    month_start = month_window(as_of).start
    empty = weekly_breakdown([], month_start, week_count)
    if not empty:
        return []

    span = DateRange(empty[0].date_range.start, empty[-1].date_range.end)
    tasks = fetch_completed(store, _owner(session), span)
    return weekly_breakdown(tasks, month_start, week_count)
