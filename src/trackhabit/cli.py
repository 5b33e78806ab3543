"""Command line interface for TrackHabit."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator, Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .domain.settings import general_settings
from .domain.sort_order import SortKey, SortOrder
from .errors import TrackHabitError
from .logging_config import get_logger, setup_logging
from .scheduler import BackoffPolicy, MilestoneScheduler
from .services import habits as habit_service
from .services.all_time import all_time_streak
from .services.intensity import gradient_for_days, intensity
from .services.seed import run_demo_seed
from .services.streaks import habits_with_milestones
from .services.summaries import AchievementStatus, summarize_milestones

logger = get_logger("cli")

pass_app = click.make_pass_decorator(AppContext)

_STATUS_LABELS = {
    AchievementStatus.ACHIEVED: "achieved",
    AchievementStatus.VERY_CLOSE: "very close",
    AchievementStatus.NOT_ACHIEVED: "locked",
}


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn domain errors into user-facing CLI errors."""
    try:
        yield
    except (TrackHabitError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding the database and logs (default: TRACKHABIT_DATA_DIR).",
)
@click.pass_context
def main(ctx: click.Context, data_dir: Optional[str]) -> None:
    """Track streaks and get reminded before the next milestone."""

    config = BaseConfig(data_dir)
    setup_logging(config)
    ctx.obj = create_app_context(config)


@main.command("init-db")
@pass_app
def init_db(app: AppContext) -> None:
    """Create the database schema."""

    # The schema is created while building the context.
    click.echo(f"Database ready: {app.config.DATABASE_URL}")


@main.command("add")
@click.argument("name")
@pass_app
def add(app: AppContext, name: str) -> None:
    """Start tracking a habit."""

    with _reported_errors():
        habit = habit_service.create_habit(app.habit_repo, name)
    click.echo(f"Added habit {habit.id}: {habit.name}")


@main.command("rename")
@click.argument("habit_id", type=int)
@click.argument("name")
@pass_app
def rename(app: AppContext, habit_id: int, name: str) -> None:
    """Rename a habit."""

    with _reported_errors():
        habit = habit_service.rename_habit(app.habit_repo, habit_id, name)
    click.echo(f"Renamed habit {habit.id} to {habit.name}")


@main.command("reset")
@click.argument("habit_id", type=int)
@click.option("--trigger", default=None, help="What caused the reset.")
@click.option("--notes", default=None, help="Free-form notes.")
@pass_app
def reset(app: AppContext, habit_id: int, trigger: Optional[str], notes: Optional[str]) -> None:
    """Close the current streak and start over."""

    with _reported_errors():
        log = habit_service.reset_habit(app.habit_repo, app.log_repo, habit_id, trigger, notes)
    click.echo(f"Reset habit {habit_id}; closed a {log.streak_duration}-day streak")


@main.command("edit-log")
@click.argument("log_id", type=int)
@click.option("--trigger", default=None)
@click.option("--notes", default=None)
@pass_app
def edit_log(app: AppContext, log_id: int, trigger: Optional[str], notes: Optional[str]) -> None:
    """Change the trigger and notes of a closed streak."""

    with _reported_errors():
        log = habit_service.edit_log(app.log_repo, log_id, trigger, notes)
    click.echo(f"Updated log {log.id}")


@main.command("delete")
@click.argument("habit_id", type=int)
@click.confirmation_option(prompt="Delete this habit and all of its logs?")
@pass_app
def delete(app: AppContext, habit_id: int) -> None:
    """Delete a habit and its history."""

    with _reported_errors():
        habit_service.delete_habit(app.habit_repo, habit_id)
    click.echo(f"Deleted habit {habit_id}")


@main.command("list")
@click.option(
    "--sort",
    "sort_key",
    type=click.Choice([key.value for key in SortKey]),
    default=SortKey.STREAK.value,
    show_default=True,
)
@click.option("--desc", is_flag=True, default=False, help="Sort descending.")
@click.option("--censor", is_flag=True, default=False, help="Mask habit names.")
@pass_app
def list_habits(app: AppContext, sort_key: str, desc: bool, censor: bool) -> None:
    """Show habits with their current streak and milestone."""

    habits = app.habit_repo.list_all()
    if not habits:
        click.echo("No habits yet. Add one with `trackhabit add NAME`.")
        return

    order = SortOrder(SortKey(sort_key), ascending=not desc)
    items = habits_with_milestones(
        habits,
        app.milestones,
        order,
        censor=censor or app.censor_names(),
    )
    for item in items:
        days = item.streak_in_days()
        _, mid, _ = gradient_for_days(days)
        click.echo(
            f"{item.habit.id:>4}  {item.display_name:<24} {days:>5}d  "
            f"{item.milestone.badge} {item.milestone.title:<24} "
            f"{intensity(days):>4.0%} {mid.hex}"
        )


@main.command("logs")
@click.argument("habit_id", type=int)
@pass_app
def show_logs(app: AppContext, habit_id: int) -> None:
    """Show the closed streaks of a habit, newest first."""

    if app.habit_repo.get_by_id(habit_id) is None:
        raise click.ClickException(f"Habit {habit_id} not found")
    logs = app.log_repo.list_for_habit(habit_id)
    if not logs:
        click.echo("No resets recorded.")
        return
    for log in logs:
        line = f"{log.id:>4}  {log.created_at:%Y-%m-%d %H:%M}  {log.streak_duration:>5}d"
        if log.trigger:
            line += f"  trigger: {log.trigger}"
        if log.notes:
            line += f"  notes: {log.notes}"
        click.echo(line)


@main.command("best")
@pass_app
def best(app: AppContext) -> None:
    """Show the all-time best streak."""

    result = all_time_streak(app.habit_repo.list_all(), app.log_repo.list_all(), app.milestones)
    if result is None:
        click.echo("No streak recorded yet.")
        return
    state = "ongoing" if result.is_ongoing else "completed"
    click.echo(f"{result.streak_in_days} days ({state}) - {result.milestone.badge} {result.milestone.title}")
    click.echo(result.formatted_duration)


@main.command("milestones")
@pass_app
def milestones(app: AppContext) -> None:
    """Show every milestone tier and whether it was reached."""

    summaries = summarize_milestones(app.milestones, app.habit_repo.list_all(), app.log_repo.list_all())
    for summary in summaries:
        milestone = summary.milestone
        upper = "+" if milestone.is_unbounded else f"-{milestone.max_days}"
        click.echo(
            f"{milestone.min_days:>5}{upper:<6} {summary.display_title:<28} "
            f"{_STATUS_LABELS[summary.status]:<11} habits: {summary.habits_in_range}"
        )


@main.command("settings")
@click.argument("key", required=False)
@click.argument("value", required=False)
@pass_app
def settings(app: AppContext, key: Optional[str], value: Optional[str]) -> None:
    """Show settings, or set KEY to VALUE."""

    definitions = {definition.key: definition for definition in general_settings()}
    if key is None:
        for definition in definitions.values():
            click.echo(f"{definition.key} = {app.settings_repo.read(definition)}")
        return
    definition = definitions.get(key)
    if definition is None:
        raise click.BadParameter(f"Unknown setting {key!r}", param_hint="KEY")
    if value is None:
        click.echo(f"{definition.key} = {app.settings_repo.read(definition)}")
        return
    if definition.value_type is bool:
        app.settings_repo.write(definition, value.strip().lower() in {"1", "true", "yes", "on"})
    else:
        app.settings_repo.write(definition, value)
    click.echo(f"{definition.key} = {app.settings_repo.read(definition)}")


@main.command("notify-check")
@pass_app
def notify_check(app: AppContext) -> None:
    """Run one milestone reminder cycle now."""

    outcome = app.notifier.run()
    click.echo(f"Result: {outcome.result.value}")
    if outcome.candidate_ids:
        click.echo(f"Habits close to a milestone: {', '.join(map(str, outcome.candidate_ids))}")


@main.command("schedule")
@click.option("--interval-days", type=click.IntRange(min=1), default=None, help="Days between checks.")
@click.option("--run-now", is_flag=True, default=False, help="Run one check before waiting.")
@pass_app
def schedule(app: AppContext, interval_days: Optional[int], run_now: bool) -> None:
    """Run the reminder job in the foreground until interrupted."""

    scheduler = MilestoneScheduler(app.notifier)
    scheduler.schedule_recurring(
        interval_days or app.config.NOTIFIER_INTERVAL_DAYS,
        backoff=BackoffPolicy(
            delay_seconds=app.config.NOTIFIER_BACKOFF_SECONDS,
            max_retries=app.config.NOTIFIER_MAX_RETRIES,
        ),
    )
    scheduler.start()
    if run_now:
        scheduler.run_once()
    click.echo("Milestone reminders scheduled; press Ctrl+C to stop.")
    try:
        while scheduler.running:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Scheduler interrupted")
    finally:
        scheduler.stop()


@main.command("seed-demo")
@pass_app
def seed_demo(app: AppContext) -> None:
    """Insert demo habits and closed streaks."""

    summary = run_demo_seed(app.session_factory, changes=app.changes)
    click.echo(f"Demo data ready: {summary.habits} habits, {summary.logs} logs")


__all__ = ["main"]
