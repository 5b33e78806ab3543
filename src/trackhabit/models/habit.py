"""Habit tracking data structures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import Field, SQLModel

from ..domain.streak_math import days_since


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp; timestamp columns reject naive values."""
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """A habit being tracked; its current streak runs from ``last_reset_at``."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False, index=True)
    last_reset_at: datetime = Field(default_factory=utc_now, nullable=False)
    is_active: bool = Field(default=True, nullable=False)

    def streak_in_days(self, now: Optional[datetime] = None) -> int:
        """Whole days elapsed since the last reset."""
        now = now or utc_now()
        return days_since(self.last_reset_at, now)


class HabitLog(SQLModel, table=True):
    """A closed streak, written when a habit is reset."""

    __tablename__: ClassVar[str] = "habit_log"

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("habit.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    streak_duration: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=utc_now, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)
    trigger: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None)


__all__ = ["Habit", "HabitLog", "utc_now"]
