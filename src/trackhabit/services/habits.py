"""Habit lifecycle operations: create, rename, reset, delete and log edits."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..domain.repositories import HabitLogRepository, HabitRepository
from ..errors import DuplicateHabitError, HabitNotFoundError, LogNotFoundError
from ..models.habit import Habit, HabitLog, utc_now

logger = logging.getLogger("trackhabit.services.habits")


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Habit name must not be empty")
    return cleaned


def _require_habit(repo: HabitRepository, habit_id: int) -> Habit:
    habit = repo.get_by_id(habit_id)
    if habit is None:
        raise HabitNotFoundError(habit_id)
    return habit


def create_habit(repo: HabitRepository, name: str, now: Optional[datetime] = None) -> Habit:
    """Start tracking a habit; its streak begins at ``now``."""

    name = _clean_name(name)
    if repo.get_by_name(name) is not None:
        raise DuplicateHabitError(name)
    now = now or utc_now()
    habit = repo.create(Habit(name=name, created_at=now, last_reset_at=now))
    logger.info("Habit created", extra={"habit_id": habit.id})
    return habit


def rename_habit(repo: HabitRepository, habit_id: int, name: str) -> Habit:
    habit = _require_habit(repo, habit_id)
    name = _clean_name(name)
    existing = repo.get_by_name(name)
    if existing is not None and existing.id != habit.id:
        raise DuplicateHabitError(name)
    habit.name = name
    return repo.update(habit)


def reset_habit(
    habit_repo: HabitRepository,
    log_repo: HabitLogRepository,
    habit_id: int,
    trigger: Optional[str] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> HabitLog:
    """Close the current streak into a log and start a new one at ``now``.

    A reset dated before the current streak started is recorded as a zero-day
    streak rather than a negative one.
    """

    habit = _require_habit(habit_repo, habit_id)
    now = now or utc_now()
    duration = max(habit.streak_in_days(now), 0)
    log = log_repo.record_reset(
        HabitLog(
            habit_id=habit_id,
            streak_duration=duration,
            created_at=now,
            updated_at=now,
            trigger=trigger,
            notes=notes,
        ),
        now,
    )
    logger.info(
        "Habit reset",
        extra={"habit_id": habit_id, "log_id": log.id, "streak_duration": duration},
    )
    return log


def delete_habit(repo: HabitRepository, habit_id: int) -> None:
    """Delete a habit and every log written for it."""

    _require_habit(repo, habit_id)
    repo.delete(habit_id)
    logger.info("Habit deleted", extra={"habit_id": habit_id})


def edit_log(
    log_repo: HabitLogRepository,
    log_id: int,
    trigger: Optional[str],
    notes: Optional[str],
    now: Optional[datetime] = None,
) -> HabitLog:
    """Change the trigger and notes of a log; the streak itself is immutable."""

    log = log_repo.get_by_id(log_id)
    if log is None:
        raise LogNotFoundError(log_id)
    log.trigger = trigger
    log.notes = notes
    log.updated_at = now or utc_now()
    return log_repo.update(log)


__all__ = [
    "create_habit",
    "delete_habit",
    "edit_log",
    "rename_habit",
    "reset_habit",
]
