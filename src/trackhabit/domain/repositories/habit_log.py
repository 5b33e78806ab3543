"""Habit log repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...infra.live import Observable
from ...models.habit import HabitLog


class HabitLogRepository(Protocol):
    """Repository for closed-streak records."""

    def get_by_id(self, log_id: int) -> Optional[HabitLog]:
        ...

    def list_for_habit(self, habit_id: int) -> list[HabitLog]:
        """Logs of one habit, newest first."""
        ...

    def observe_for_habit(self, habit_id: int) -> Observable[list[HabitLog]]:
        ...

    def longest_for_habit(self, habit_id: int) -> Optional[HabitLog]:
        ...

    def observe_longest_for_habit(self, habit_id: int) -> Observable[Optional[HabitLog]]:
        ...

    def list_all(self) -> list[HabitLog]:
        """All logs, longest streak first."""
        ...

    def observe_all(self) -> Observable[list[HabitLog]]:
        ...

    def create(self, log: HabitLog) -> HabitLog:
        ...

    def update(self, log: HabitLog) -> HabitLog:
        ...

    def record_reset(self, log: HabitLog, reset_at: datetime) -> HabitLog:
        """Store ``log`` and restart its habit's streak at ``reset_at`` atomically."""
        ...
