"""tally CLI - daily tasks and habits."""

import json
import logging
import sys
from datetime import date
from functools import wraps

import click

from .adapters.supabase_auth import SupabaseAuth
from .config import load_config
from .core.tasks import Partition, Task
from .errors import TallyError
from .reports import monthly_breakdown, monthly_report, weekly_report
from .reset import reset_recurring_tasks, run_reset_scheduler
from .workflows import get_reset_store, get_session, get_store, open_ledger, open_notifications


def handle_errors(fn):
    """Report tasktally and configuration errors on stderr and exit 1."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (TallyError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    return wrapper


def _task_json(t: Task) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "completed": t.completed,
        "recurring": t.recurring,
        "position": t.position,
        "created_at": t.created_at.isoformat() if t.created_at else None,
        "completed_at": t.completed_at.isoformat() if t.completed_at else None,
    }


def _show_tasks(tasks: list[Task], as_json: bool, empty_msg: str, tz=None, show_date: bool = False) -> None:
    """Shared task display logic."""
    if as_json:
        click.echo(json.dumps([_task_json(t) for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    for task in tasks:
        box = "[x]" if task.completed else "[ ]"
        repeat = " (daily)" if task.recurring else ""
        when = ""
        if show_date and task.completed_at:
            when = f"  {task.completed_at.astimezone(tz).strftime('%b %d, %H:%M')}"
        click.echo(f"{box} {task.id[:8]}  {task.title}{repeat}{when}")


def _resolve_id(ledger, task_id: str) -> str:
    """Accept a full id or an unambiguous prefix of one."""
    matches = [t.id for t in ledger.tasks if t.id.startswith(task_id)]
    if task_id in matches:
        return task_id
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise click.UsageError(f"Ambiguous id {task_id!r} matches {len(matches)} tasks")
    return task_id


@click.group()
@click.version_option(package_name="tasktally")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """tally - track daily tasks and habits."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


@main.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@handle_errors
def login(email: str, password: str):
    """Sign in to the Supabase backend."""
    config = load_config()
    if config.backend != "supabase":
        click.echo(f"Backend is '{config.backend}'; no sign-in needed.")
        return
    session = SupabaseAuth(config).sign_in(email, password)
    click.echo(f"Signed in as {session.user_id}")


@main.command()
@handle_errors
def logout():
    """Sign out of the Supabase backend."""
    config = load_config()
    session = get_session(config)
    if isinstance(session, SupabaseAuth):
        session.sign_out()
    click.echo("Signed out.")


@main.command()
@click.argument("title", nargs=-1, required=True)
@click.option("--recurring", "-r", is_flag=True, help="Repeat daily")
@handle_errors
def add(title: tuple[str, ...], recurring: bool):
    """Add a task."""
    ledger = open_ledger(load_config())
    task = ledger.add_task(" ".join(title), recurring=recurring)
    click.echo(f"Added {task.id[:8]}  {task.title}{' (daily)' if task.recurring else ''}")


@main.command()
@click.argument("task_id")
@handle_errors
def done(task_id: str):
    """Toggle a task between done and not done."""
    ledger = open_ledger(load_config())
    task = ledger.toggle_task(_resolve_id(ledger, task_id))
    state = "Completed" if task.completed else "Reopened"
    click.echo(f"{state}: {task.title}")


@main.command()
@click.argument("task_id")
@handle_errors
def rm(task_id: str):
    """Delete a task (active or from history)."""
    ledger = open_ledger(load_config())
    task = ledger.get(_resolve_id(ledger, task_id))
    ledger.delete_task(task.id)
    click.echo(f"Deleted: {task.title}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@handle_errors
def today(as_json: bool):
    """List today's tasks, recurring ones included."""
    ledger = open_ledger(load_config())
    tasks = ledger.view_today()
    _show_tasks(tasks, as_json, "No tasks for today. Add one to get started!")
    if tasks and not as_json:
        click.echo(f"\nProgress: {ledger.progress()}%")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@handle_errors
def recurring(as_json: bool):
    """List recurring tasks."""
    ledger = open_ledger(load_config())
    _show_tasks(ledger.view_recurring(), as_json, "No recurring tasks yet. Create daily habits!")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@handle_errors
def history(as_json: bool):
    """List completed tasks, most recent first."""
    config = load_config()
    ledger = open_ledger(config)
    _show_tasks(ledger.view_history(), as_json, "No completed tasks yet. Keep going!", tz=config.tz, show_date=True)


@main.command("on")
@click.argument("day")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@handle_errors
def on_date(day: str, as_json: bool):
    """Show tasks created or completed on DAY (YYYY-MM-DD)."""
    target = date.fromisoformat(day)
    ledger = open_ledger(load_config())
    result = ledger.tasks_on_date(target)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "date": target.isoformat(),
                    "created": [_task_json(t) for t in result.created],
                    "completed": [_task_json(t) for t in result.completed],
                },
                indent=2,
            )
        )
        return

    click.echo(f"### {target.strftime('%A, %B %d, %Y')}")
    click.echo(f"\nCreated ({len(result.created)})")
    _show_tasks(result.created, False, "  No tasks created on this date.")
    click.echo(f"\nCompleted ({len(result.completed)})")
    _show_tasks(result.completed, False, "  No tasks completed on this date.")


@main.command()
@handle_errors
def progress():
    """Show the share of today's tasks that are done."""
    ledger = open_ledger(load_config())
    tasks = ledger.view_today()
    done_count = sum(1 for t in tasks if t.completed)
    click.echo(f"{ledger.progress()}% ({done_count}/{len(tasks)})")


@main.command()
@click.argument("partition", type=click.Choice([p.value for p in Partition]))
@click.argument("task_ids", nargs=-1, required=True)
@handle_errors
def reorder(partition: str, task_ids: tuple[str, ...]):
    """Set the order of the active or recurring list."""
    ledger = open_ledger(load_config())
    which = Partition(partition)
    ordered = [_resolve_id(ledger, t) for t in task_ids]
    ledger.reorder(which, ordered)
    view = ledger.view_recurring() if which is Partition.RECURRING else [
        t for t in ledger.view_today() if not t.recurring
    ]
    _show_tasks(view, False, "Nothing to order.")


@main.command()
@click.argument("period", type=click.Choice(["week", "month", "weeks"]), default="week")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@handle_errors
def report(period: str, as_json: bool):
    """Show performance for this week, this month, or each week of the month."""
    config = load_config()
    session = get_session(config)
    store = get_store(config, session)

    if period == "weeks":
        weeks = monthly_breakdown(store, session, config)
        if as_json:
            click.echo(
                json.dumps(
                    [
                        {
                            "week": w.week_number,
                            "completed": w.completed_count,
                            "score": w.score,
                            "start": w.date_range.start.isoformat(),
                            "end": w.date_range.end.isoformat(),
                        }
                        for w in weeks
                    ],
                    indent=2,
                )
            )
            return
        for w in weeks:
            click.echo(f"Week {w.week_number}  {w.date_range.format():24} {w.completed_count:3} tasks  {w.score:3} pts")
        return

    fetch = weekly_report if period == "week" else monthly_report
    result = fetch(store, session, config)
    if as_json:
        click.echo(
            json.dumps(
                {
                    "period": result.period,
                    "completed": result.completed_count,
                    "score": result.score,
                    "normalized": result.normalized,
                    "start": result.date_range.start.isoformat(),
                    "end": result.date_range.end.isoformat(),
                },
                indent=2,
            )
        )
        return

    click.echo(f"This {result.period}: {result.date_range.format()}")
    click.echo(f"  Tasks completed: {result.completed_count}")
    click.echo(f"  Score earned:    {result.score} ({result.normalized}/100)")


@main.group(invoke_without_command=True)
@click.pass_context
def notifications(ctx):
    """Show and manage notifications."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(notifications_list)


@notifications.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@handle_errors
def notifications_list(as_json: bool = False):
    """List notifications, newest first."""
    center = open_notifications(load_config())
    items = center.fetch()

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": n.id,
                        "title": n.title,
                        "message": n.message,
                        "type": n.type.value,
                        "read": n.read,
                        "timestamp": n.timestamp.isoformat() if n.timestamp else None,
                    }
                    for n in items
                ],
                indent=2,
            )
        )
        return

    if not items:
        click.echo("No notifications.")
        return

    for n in items:
        marker = " " if n.read else "*"
        click.echo(f"{marker} {n.id[:8]}  {n.title}: {n.message}")


@notifications.command("read")
@click.argument("notification_id")
@handle_errors
def notifications_read(notification_id: str):
    """Mark a notification as read."""
    open_notifications(load_config()).mark_read(notification_id)
    click.echo("Marked as read.")


@notifications.command("rm")
@click.argument("notification_id")
@handle_errors
def notifications_rm(notification_id: str):
    """Delete a notification."""
    open_notifications(load_config()).delete(notification_id)
    click.echo("Notification deleted.")


@notifications.command("clear")
@handle_errors
def notifications_clear():
    """Delete all notifications."""
    count = open_notifications(load_config()).clear_all()
    click.echo(f"Cleared {count} notifications.")


@main.command()
@handle_errors
def reset():
    """Reset every completed recurring task now."""
    result = reset_recurring_tasks(get_reset_store(load_config()))
    if not result.ok:
        click.echo(f"Error: {result.message}", err=True)
        sys.exit(1)
    click.echo(f"{result.message} ({result.reset_count} tasks)")


@main.command("reset-daemon")
@handle_errors
def reset_daemon():
    """Run the daily recurring task reset on a schedule."""
    config = load_config()
    logging.getLogger().setLevel(logging.INFO)
    click.echo(f"Resetting recurring tasks daily at {config.reset_time} ({config.timezone})")
    click.echo("Press Ctrl+C to stop")
    run_reset_scheduler(get_reset_store(config), config)
