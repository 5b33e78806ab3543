"""Streak helpers: classification of habits and the sort engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..domain.milestones import MilestoneDefinition, MilestoneTable
from ..domain.sort_order import SortKey, SortOrder
from ..domain.streak_math import as_utc, days_since
from ..models.habit import Habit, utc_now

CENSORED_LENGTH = 8


@dataclass(frozen=True)
class HabitWithMilestone:
    """A habit paired with the tier its current streak falls in."""

    habit: Habit
    milestone: MilestoneDefinition
    display_name: str

    def streak_in_days(self, now: Optional[datetime] = None) -> int:
        return self.habit.streak_in_days(now)


def censor_name(name: str) -> str:
    """Mask a habit name: keep two characters and pad with ``*``.

    Names of one or two characters are first extended by shifting the last
    letter three places so that the visible prefix never equals the full name.
    """

    if len(name) <= 2:
        chars = list(name)
        while len(chars) < 3:
            last = chars[-1] if chars else "A"
            if last.isalpha() and last.isascii():
                base = ord("A") if last.isupper() else ord("a")
                chars.append(chr((ord(last) - base + 3) % 26 + base))
            else:
                chars.append("A")
        prefix = "".join(chars)[:2]
    else:
        prefix = name[:2]
    return prefix.ljust(CENSORED_LENGTH, "*")


def sort_habits(
    items: Iterable[HabitWithMilestone],
    order: SortOrder,
    now: Optional[datetime] = None,
) -> list[HabitWithMilestone]:
    """Order habits by ``order``; streak lengths are recomputed at ``now``.

    Equal keys fall back to name ascending, then id ascending, whatever the
    direction.
    """

    now = now or utc_now()
    # Secondary order first; Python's sort is stable, including with reverse=True.
    ordered = sorted(items, key=lambda item: (item.habit.name, item.habit.id or 0))
    reverse = not order.ascending

    if order.key is SortKey.NAME:
        return sorted(ordered, key=lambda item: item.habit.name, reverse=reverse)
    if order.key is SortKey.CREATION:
        return sorted(ordered, key=lambda item: as_utc(item.habit.created_at), reverse=reverse)
    if order.key is SortKey.STREAK:
        return sorted(ordered, key=lambda item: days_since(item.habit.last_reset_at, now), reverse=reverse)
    raise ValueError(f"Unsupported sort key: {order.key!r}")


def habits_with_milestones(
    habits: Iterable[Habit],
    table: MilestoneTable,
    order: SortOrder = SortOrder(),
    now: Optional[datetime] = None,
    *,
    censor: bool = False,
) -> list[HabitWithMilestone]:
    """Classify each habit's current streak and sort the result."""

    now = now or utc_now()
    items = [
        HabitWithMilestone(
            habit=habit,
            milestone=table.classify(habit.streak_in_days(now)),
            display_name=censor_name(habit.name) if censor else habit.name,
        )
        for habit in habits
    ]
    return sort_habits(items, order, now)


def highest_ongoing(
    habits: Sequence[Habit],
    table: MilestoneTable,
    now: Optional[datetime] = None,
) -> Optional[HabitWithMilestone]:
    """Active habit with the longest current streak, or None."""

    active = [habit for habit in habits if habit.is_active]
    ranked = habits_with_milestones(active, table, SortOrder.by_streak(ascending=False), now)
    return ranked[0] if ranked else None


__all__ = [
    "HabitWithMilestone",
    "censor_name",
    "days_since",
    "habits_with_milestones",
    "highest_ongoing",
    "sort_habits",
]
