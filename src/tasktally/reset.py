"""Daily reset of recurring tasks."""

import logging
from dataclasses import dataclass

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Config, load_config
from .errors import StoreError
from .ports.record_store import TASKS, RecordStore, eq

logger = logging.getLogger(__name__)


@dataclass
class ResetResult:
    ok: bool
    message: str
    reset_count: int = 0


def reset_recurring_tasks(store: RecordStore) -> ResetResult:
    """
    Mark every completed recurring task incomplete, for all users.

    Safe to retry: a second run finds nothing left to reset.
    """
    try:
        count = store.update(
            TASKS,
            {"completed": False, "completed_at": None},
            [eq("recurring", True), eq("completed", True)],
        )
    except StoreError as e:
        logger.error(f"Error resetting tasks: {e}")
        return ResetResult(ok=False, message=str(e))

    logger.info(f"Successfully reset {count} recurring tasks")
    return ResetResult(ok=True, message="Recurring tasks reset successfully", reset_count=count)


def setup_scheduler(store: RecordStore, config: Config | None = None) -> BlockingScheduler:
    """Schedule the reset once a day at config.reset_time."""
    if config is None:
        config = load_config()

    tz = config.timezone or "UTC"
    scheduler = BlockingScheduler(timezone=tz)

    try:
        hour, minute = map(int, config.reset_time.split(":"))
    except ValueError:
        raise ValueError(f"Invalid RESET_TIME format: {config.reset_time!r} (expected HH:MM)") from None

    scheduler.add_job(
        reset_recurring_tasks,
        CronTrigger(hour=hour, minute=minute, timezone=tz),
        args=[store],
        id="reset_recurring_tasks",
        replace_existing=True,
    )
    logger.info(f"Scheduled recurring task reset at {hour:02d}:{minute:02d} {tz}")
    return scheduler


def run_reset_scheduler(store: RecordStore, config: Config | None = None) -> None:
    """Block, running the reset every day until interrupted."""
    scheduler = setup_scheduler(store, config)
    logger.info("Starting recurring task reset scheduler...")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Reset scheduler stopped")
