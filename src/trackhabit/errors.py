"""Exception hierarchy shared across the package."""

from __future__ import annotations


class TrackHabitError(Exception):
    """Base class for errors raised by TrackHabit."""


class DuplicateHabitError(TrackHabitError):
    """A habit with the same name already exists."""

    def __init__(self, name: str):
        super().__init__(f"A habit named {name!r} already exists")
        self.name = name


class HabitNotFoundError(TrackHabitError, LookupError):
    """The requested habit does not exist."""

    def __init__(self, habit_id: int):
        super().__init__(f"Habit {habit_id} not found")
        self.habit_id = habit_id


class LogNotFoundError(TrackHabitError, LookupError):
    """The requested habit log does not exist."""

    def __init__(self, log_id: int):
        super().__init__(f"Habit log {log_id} not found")
        self.log_id = log_id


__all__ = [
    "DuplicateHabitError",
    "HabitNotFoundError",
    "LogNotFoundError",
    "TrackHabitError",
]
