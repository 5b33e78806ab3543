"""Tests for habit lifecycle operations."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import event

from trackhabit.errors import DuplicateHabitError, HabitNotFoundError, LogNotFoundError
from trackhabit.models import Habit
from trackhabit.services.habits import (
    create_habit,
    delete_habit,
    edit_log,
    rename_habit,
    reset_habit,
)

from tests.conftest import NOW


def test_create_habit_starts_streak_now(habit_repo):
    habit = create_habit(habit_repo, "  Sugar  ", NOW)

    assert habit.name == "Sugar"
    assert habit.created_at == NOW
    assert habit.last_reset_at == NOW
    assert habit.streak_in_days(NOW + timedelta(days=3)) == 3


def test_default_clock_round_trips_through_the_store(habit_repo, log_repo):
    habit = create_habit(habit_repo, "Sugar")
    log = reset_habit(habit_repo, log_repo, habit.id)

    stored = habit_repo.get_by_id(habit.id)
    assert stored.created_at.utcoffset() == timedelta(0)
    assert stored.last_reset_at >= stored.created_at
    assert stored.streak_in_days() == 0
    assert log_repo.get_by_id(log.id).created_at.utcoffset() == timedelta(0)


def test_create_habit_rejects_duplicates_and_blank_names(habit_repo):
    create_habit(habit_repo, "Sugar", NOW)
    with pytest.raises(DuplicateHabitError):
        create_habit(habit_repo, "Sugar", NOW)
    with pytest.raises(ValueError):
        create_habit(habit_repo, "   ", NOW)


def test_rename_habit(habit_repo, habit_factory):
    habit = habit_factory("Sugar")
    habit_factory("Coffee")

    assert rename_habit(habit_repo, habit.id, "Candy").name == "Candy"
    # Renaming to its own name is allowed.
    assert rename_habit(habit_repo, habit.id, "Candy").name == "Candy"
    with pytest.raises(DuplicateHabitError):
        rename_habit(habit_repo, habit.id, "Coffee")
    with pytest.raises(HabitNotFoundError):
        rename_habit(habit_repo, 999, "Other")


def test_reset_habit_closes_streak(habit_repo, log_repo, habit_factory):
    habit = habit_factory("Sugar", streak_days=42)

    log = reset_habit(habit_repo, log_repo, habit.id, trigger="party", notes="cake", now=NOW)

    assert log.streak_duration == 42
    assert log.created_at == NOW
    assert (log.trigger, log.notes) == ("party", "cake")
    assert habit_repo.get_by_id(habit.id).streak_in_days(NOW) == 0
    assert log_repo.longest_for_habit(habit.id).id == log.id


def test_failed_reset_leaves_no_log_behind(habit_repo, log_repo, habit_factory):
    habit = habit_factory("Sugar", streak_days=42)

    def _reject_update(mapper, connection, target):
        raise RuntimeError("disk full")

    event.listen(Habit, "before_update", _reject_update)
    try:
        with pytest.raises(RuntimeError, match="disk full"):
            reset_habit(habit_repo, log_repo, habit.id, now=NOW)
    finally:
        event.remove(Habit, "before_update", _reject_update)

    assert log_repo.list_for_habit(habit.id) == []
    assert habit_repo.get_by_id(habit.id).streak_in_days(NOW) == 42

    # A retry records the streak exactly once.
    reset_habit(habit_repo, log_repo, habit.id, now=NOW)
    assert [log.streak_duration for log in log_repo.list_for_habit(habit.id)] == [42]


def test_reset_in_the_past_records_zero_days(habit_repo, log_repo, habit_factory):
    habit = habit_factory("Sugar", streak_days=1)

    log = reset_habit(habit_repo, log_repo, habit.id, now=NOW - timedelta(days=5))

    assert log.streak_duration == 0


def test_reset_missing_habit(habit_repo, log_repo):
    with pytest.raises(HabitNotFoundError):
        reset_habit(habit_repo, log_repo, 77, now=NOW)


def test_delete_habit(habit_repo, log_repo, habit_factory, log_factory):
    habit = habit_factory("Sugar")
    log_factory(habit, 4)

    delete_habit(habit_repo, habit.id)

    assert habit_repo.get_by_id(habit.id) is None
    assert log_repo.list_for_habit(habit.id) == []
    with pytest.raises(HabitNotFoundError):
        delete_habit(habit_repo, habit.id)


def test_edit_log_only_touches_trigger_and_notes(log_repo, habit_factory, log_factory):
    habit = habit_factory("Sugar")
    log = log_factory(habit, 9, ended_days_ago=3)
    later = NOW + timedelta(hours=1)

    edited = edit_log(log_repo, log.id, "boredom", None, now=later)

    assert edited.trigger == "boredom"
    assert edited.notes is None
    assert edited.updated_at == later
    assert edited.streak_duration == 9
    assert edited.created_at == log.created_at
    with pytest.raises(LogNotFoundError):
        edit_log(log_repo, 404, None, None)
