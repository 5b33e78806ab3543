"""Habit repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...infra.live import Observable
from ...models.habit import Habit


class HabitRepository(Protocol):
    """Repository for managing habit entities."""

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def get_by_name(self, name: str) -> Optional[Habit]:
        """Retrieve a habit by name."""
        ...

    def list_all(self, include_inactive: bool = True) -> list[Habit]:
        """List habits ordered by id."""
        ...

    def observe_all(self, include_inactive: bool = True) -> Observable[list[Habit]]:
        """Live view of ``list_all`` that re-emits after every mutation."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Create a new habit; names must be unique."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int) -> None:
        """Delete a habit and its logs."""
        ...
