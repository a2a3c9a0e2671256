"""Tests for scoring and report windows."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from tasktally.core.scoring import (
    DateRange,
    aggregate,
    month_window,
    normalize,
    week_window,
    weekly_breakdown,
)
from tasktally.core.tasks import Task

UTC = timezone.utc


def done(id, at, recurring=False):
    return Task(
        id=id,
        title=f"Task {id}",
        owner_id="user-1",
        created_at=at - timedelta(hours=1),
        completed=True,
        recurring=recurring,
        completed_at=at,
    )


@pytest.fixture
def wednesday():
    return datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


class TestAggregate:
    def test_recurring_worth_two_points(self, wednesday):
        tasks = [done("r", wednesday, recurring=True), done("o", wednesday)]
        result = aggregate(tasks, wednesday - timedelta(days=1), wednesday + timedelta(days=1))
        assert result.completed_count == 2
        assert result.score == 3

    def test_bounds_are_inclusive(self, wednesday):
        start = wednesday
        end = wednesday + timedelta(days=1)
        tasks = [done("s", start), done("e", end), done("after", end + timedelta(microseconds=1))]
        result = aggregate(tasks, start, end)
        assert result.completed_count == 2

    def test_ignores_incomplete_tasks(self, wednesday):
        open_task = Task(id="x", title="x", owner_id="u", created_at=wednesday)
        result = aggregate([open_task], wednesday - timedelta(days=1), wednesday + timedelta(days=1))
        assert result.completed_count == 0
        assert result.score == 0

    def test_empty(self, wednesday):
        result = aggregate([], wednesday, wednesday)
        assert (result.completed_count, result.score) == (0, 0)


class TestNormalize:
    def test_clamped_to_100(self):
        assert normalize(120, 100) == 100

    def test_scaled(self):
        assert normalize(50, 200) == 25

    def test_rounds_half_up(self):
        assert normalize(1, 8) == 13  # 12.5

    def test_zero(self):
        assert normalize(0, 50) == 0

    def test_rejects_non_positive_cap(self):
        with pytest.raises(ValueError):
            normalize(10, 0)


class TestWindows:
    def test_week_starts_monday(self, wednesday):
        window = week_window(wednesday)
        assert window.start == datetime(2025, 1, 13, tzinfo=UTC)
        assert window.end.date() == datetime(2025, 1, 19).date()
        assert window.end.hour == 23 and window.end.minute == 59

    def test_week_window_on_monday_and_sunday(self):
        monday = datetime(2025, 1, 13, 0, 0, tzinfo=UTC)
        sunday = datetime(2025, 1, 19, 23, 0, tzinfo=UTC)
        assert week_window(monday).start == monday
        assert week_window(sunday).start == monday

    def test_month_window(self, wednesday):
        window = month_window(wednesday)
        assert window.start == datetime(2025, 1, 1, tzinfo=UTC)
        assert window.end.date() == datetime(2025, 1, 31).date()

    def test_month_window_february_leap_year(self):
        window = month_window(datetime(2024, 2, 10, tzinfo=UTC))
        assert window.end.day == 29

    def test_month_window_december(self):
        window = month_window(datetime(2025, 12, 31, 22, 0, tzinfo=UTC))
        assert window.start == datetime(2025, 12, 1, tzinfo=UTC)
        assert window.end.date() == datetime(2025, 12, 31).date()

    def test_windows_keep_timezone(self):
        tz = ZoneInfo("America/Toronto")
        window = week_window(datetime(2025, 1, 15, 12, 0, tzinfo=tz))
        assert window.start.tzinfo is tz

    def test_date_range_format(self, wednesday):
        assert week_window(wednesday).format() == "Jan 13 - Jan 19, 2025"


class TestWeeklyBreakdown:
    def test_week_windows_follow_month_start(self):
        # Jan 1 2025 is a Wednesday
        month_start = datetime(2025, 1, 1, tzinfo=UTC)
        weeks = weekly_breakdown([], month_start, 4)
        assert [w.week_number for w in weeks] == [1, 2, 3, 4]
        assert weeks[0].date_range.start == month_start
        assert weeks[0].date_range.end.date() == datetime(2025, 1, 5).date()
        assert weeks[1].date_range.start == datetime(2025, 1, 8, tzinfo=UTC)
        assert weeks[1].date_range.end.date() == datetime(2025, 1, 12).date()

    def test_days_between_windows_are_not_counted(self):
        # Jan 6-7 fall after week 1 ends (Sunday) and before week 2 starts (Jan 8)
        month_start = datetime(2025, 1, 1, tzinfo=UTC)
        tasks = [done("gap", datetime(2025, 1, 6, 10, 0, tzinfo=UTC))]
        weeks = weekly_breakdown(tasks, month_start, 4)
        assert sum(w.completed_count for w in weeks) == 0

    def test_last_week_can_extend_past_month_end(self):
        month_start = datetime(2025, 2, 1, tzinfo=UTC)  # Saturday
        weeks = weekly_breakdown([], month_start, 5)
        assert weeks[-1].date_range.start == datetime(2025, 3, 1, tzinfo=UTC)

    def test_scores_per_week(self):
        month_start = datetime(2025, 1, 1, tzinfo=UTC)
        tasks = [
            done("w1", datetime(2025, 1, 2, 9, 0, tzinfo=UTC), recurring=True),
            done("w2a", datetime(2025, 1, 9, 9, 0, tzinfo=UTC)),
            done("w2b", datetime(2025, 1, 10, 9, 0, tzinfo=UTC)),
        ]
        weeks = weekly_breakdown(tasks, month_start, 4)
        assert [(w.completed_count, w.score) for w in weeks] == [(1, 2), (2, 2), (0, 0), (0, 0)]

    def test_zero_weeks(self):
        assert weekly_breakdown([], datetime(2025, 1, 1, tzinfo=UTC), 0) == []


class TestDateRange:
    def test_contains_is_inclusive(self, wednesday):
        window = DateRange(wednesday, wednesday + timedelta(hours=1))
        assert window.contains(wednesday)
        assert window.contains(wednesday + timedelta(hours=1))
        assert not window.contains(wednesday - timedelta(seconds=1))
