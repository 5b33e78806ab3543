"""Periodic milestone reminder.

One cycle snapshots every habit, collects those close to entering a new
milestone tier and compares the result with the persisted notified state. Only
a changed, non-empty candidate list is persisted and announced. The state is
written before the notification goes out, so a crash in between can repeat a
reminder on the next run but never lose one.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from ..domain.milestones import MilestoneDefinition, MilestoneTable
from ..domain.repositories import HabitRepository, SettingsRepository
from ..domain.settings import (
    LAST_NOTIFIED_STREAKS,
    NOTIFICATIONS_ENABLED,
    NotifiedMilestoneState,
    decode_notified_state,
    encode_notified_state,
)
from ..models.habit import Habit, utc_now
from .notifications import NotificationSink

logger = logging.getLogger("trackhabit.services.notifier")

DEFAULT_THRESHOLD = 0.98


class NotifierState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    NO_CHANGE = "no_change"
    NOTIFYING = "notifying"


class CycleResult(str, Enum):
    NO_CANDIDATES = "no_candidates"
    UNCHANGED = "unchanged"
    NOTIFICATIONS_DISABLED = "notifications_disabled"
    NOTIFIED = "notified"


@dataclass(frozen=True)
class CycleOutcome:
    """What one evaluation cycle did."""

    result: CycleResult
    candidate_ids: tuple[int, ...] = field(default_factory=tuple)
    state_written: bool = False

    @property
    def notified(self) -> bool:
        return self.result is CycleResult.NOTIFIED


def milestone_window_start(milestone: MilestoneDefinition, threshold: float = DEFAULT_THRESHOLD) -> int:
    """First day count that counts as close to ``milestone``."""
    return math.floor(milestone.min_days * threshold)


def habits_near_milestone(
    milestone: MilestoneDefinition,
    habits: Iterable[Habit],
    now: datetime,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[Habit]:
    """Habits with ``floor(min_days * threshold) <= days < max_days``."""

    start = milestone_window_start(milestone, threshold)
    return [
        habit
        for habit in habits
        if start <= habit.streak_in_days(now) < milestone.max_days
    ]


def find_near_milestone_habits(
    table: MilestoneTable,
    habits: Iterable[Habit],
    now: datetime,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[Habit]:
    """Union of every milestone's window, in order of first appearance.

    A habit can sit in more than one window when tiers are narrow; it is
    listed once.
    """

    habits = list(habits)
    seen: set[int] = set()
    candidates: list[Habit] = []
    for milestone in table:
        for habit in habits_near_milestone(milestone, habits, now, threshold):
            key = habit.id if habit.id is not None else id(habit)
            if key in seen:
                continue
            seen.add(key)
            candidates.append(habit)
    return candidates


class MilestoneNotifier:
    """Evaluates near-milestone habits and sends at most one reminder per change."""

    def __init__(
        self,
        habit_repo: HabitRepository,
        settings_repo: SettingsRepository,
        sink: NotificationSink,
        table: MilestoneTable,
        *,
        threshold: float = DEFAULT_THRESHOLD,
    ):
        self.habit_repo = habit_repo
        self.settings_repo = settings_repo
        self.sink = sink
        self.table = table
        self.threshold = threshold
        self.state = NotifierState.IDLE
        self._lock = threading.Lock()

    def load_state(self) -> NotifiedMilestoneState:
        return decode_notified_state(self.settings_repo.get_str(LAST_NOTIFIED_STREAKS.key))

    def _notifications_permitted(self) -> bool:
        return self.sink.is_enabled() and self.settings_repo.read(NOTIFICATIONS_ENABLED)

    def run(self, now: Optional[datetime] = None) -> CycleOutcome:
        """Run one evaluation cycle; unexpected errors propagate to the caller."""

        with self._lock:
            self.state = NotifierState.EVALUATING
            try:
                return self._evaluate(now or utc_now())
            finally:
                self.state = NotifierState.IDLE

    def _evaluate(self, now: datetime) -> CycleOutcome:
        habits = self.habit_repo.list_all()
        candidates = find_near_milestone_habits(self.table, habits, now, self.threshold)
        candidate_ids = tuple(habit.id for habit in candidates)
        candidate_state = NotifiedMilestoneState.of(candidate_ids)

        if candidate_state.is_empty():
            self.state = NotifierState.NO_CHANGE
            logger.info("No habits close to a milestone", extra={"habits": len(habits)})
            return CycleOutcome(CycleResult.NO_CANDIDATES)

        if candidate_state == self.load_state():
            self.state = NotifierState.NO_CHANGE
            logger.info(
                "Near-milestone habits unchanged; skipping reminder",
                extra={"habit_ids": list(candidate_state.habit_ids)},
            )
            return CycleOutcome(CycleResult.UNCHANGED, candidate_ids)

        self.state = NotifierState.NOTIFYING
        self.settings_repo.set_str(LAST_NOTIFIED_STREAKS.key, encode_notified_state(candidate_state))

        if not self._notifications_permitted():
            logger.info(
                "Notifications disabled; state updated without reminder",
                extra={"habit_ids": list(candidate_state.habit_ids)},
            )
            return CycleOutcome(
                CycleResult.NOTIFICATIONS_DISABLED, candidate_ids, state_written=True
            )

        if len(candidates) == 1:
            self.sink.notify_single(candidates[0])
        else:
            self.sink.notify_count(len(candidates))

        logger.info(
            "Milestone reminder sent",
            extra={"habit_ids": list(candidate_state.habit_ids)},
        )
        return CycleOutcome(CycleResult.NOTIFIED, candidate_ids, state_written=True)


__all__ = [
    "CycleOutcome",
    "CycleResult",
    "DEFAULT_THRESHOLD",
    "MilestoneNotifier",
    "NotifierState",
    "find_near_milestone_habits",
    "habits_near_milestone",
    "milestone_window_start",
]
