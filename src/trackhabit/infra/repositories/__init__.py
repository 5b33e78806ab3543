"""Concrete repository implementations using SQLModel."""

from .habit import SQLModelHabitRepository
from .habit_log import SQLModelHabitLogRepository
from .settings import SQLModelSettingsRepository

__all__ = [
    "SQLModelHabitLogRepository",
    "SQLModelHabitRepository",
    "SQLModelSettingsRepository",
]
