"""Repository protocol definitions for domain layer."""

from .habit import HabitRepository
from .habit_log import HabitLogRepository
from .settings import SettingsRepository

__all__ = [
    "HabitLogRepository",
    "HabitRepository",
    "SettingsRepository",
]
