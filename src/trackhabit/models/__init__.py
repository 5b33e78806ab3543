"""SQLModel table exports."""

from .habit import Habit, HabitLog
from .settings import AppSetting

__all__ = [
    "AppSetting",
    "Habit",
    "HabitLog",
]
