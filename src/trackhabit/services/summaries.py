"""Per-tier achievement overview."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..domain.milestones import MilestoneDefinition, MilestoneTable
from ..models.habit import Habit, HabitLog, utc_now

VERY_CLOSE_THRESHOLD = 0.95
HIDDEN_TITLE = "???"


class AchievementStatus(str, Enum):
    ACHIEVED = "achieved"
    VERY_CLOSE = "very_close"
    NOT_ACHIEVED = "not_achieved"


@dataclass(frozen=True)
class MilestoneSummary:
    milestone: MilestoneDefinition
    status: AchievementStatus
    habits_in_range: int

    @property
    def achieved(self) -> bool:
        return self.status is AchievementStatus.ACHIEVED

    @property
    def display_title(self) -> str:
        return self.milestone.title if self.achieved else HIDDEN_TITLE


def longest_streak_ever(
    habits: Iterable[Habit],
    logs: Iterable[HabitLog],
    now: Optional[datetime] = None,
) -> int:
    now = now or utc_now()
    ongoing = (habit.streak_in_days(now) for habit in habits if habit.is_active)
    completed = (log.streak_duration for log in logs)
    return max(max(ongoing, default=0), max(completed, default=0))


def achievement_status(milestone: MilestoneDefinition, best: int) -> AchievementStatus:
    if best >= milestone.min_days:
        return AchievementStatus.ACHIEVED
    if best >= math.floor(milestone.min_days * VERY_CLOSE_THRESHOLD):
        return AchievementStatus.VERY_CLOSE
    return AchievementStatus.NOT_ACHIEVED


def summarize_milestones(
    table: MilestoneTable,
    habits: Sequence[Habit],
    logs: Sequence[HabitLog],
    now: Optional[datetime] = None,
) -> list[MilestoneSummary]:
    """One entry per tier, in table order."""

    now = now or utc_now()
    best = longest_streak_ever(habits, logs, now)
    current = [habit.streak_in_days(now) for habit in habits if habit.is_active]
    return [
        MilestoneSummary(
            milestone=milestone,
            status=achievement_status(milestone, best),
            habits_in_range=sum(1 for days in current if milestone.contains(days)),
        )
        for milestone in table
    ]


__all__ = [
    "AchievementStatus",
    "HIDDEN_TITLE",
    "MilestoneSummary",
    "VERY_CLOSE_THRESHOLD",
    "achievement_status",
    "longest_streak_ever",
    "summarize_milestones",
]
