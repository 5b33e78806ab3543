"""All-time best streak: the best ongoing habit versus the best closed log."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from ..domain.milestones import MilestoneDefinition, MilestoneTable
from ..infra.live import Observable, Subscription, combine_latest
from ..models.habit import Habit, HabitLog, utc_now
from .streaks import HabitWithMilestone, highest_ongoing

logger = logging.getLogger("trackhabit.services.all_time")

ACTIVE_SINCE_FORMAT = "%m/%d/%Y %I:%M %p"
DURATION_FORMAT = "%m/%d/%y"


@dataclass(frozen=True)
class AllTimeStreak:
    """The best streak on record.

    ``end_date`` is None while the streak is still running.
    """

    streak_in_days: int
    milestone: MilestoneDefinition
    start_date: datetime
    end_date: Optional[datetime]

    @property
    def is_ongoing(self) -> bool:
        return self.end_date is None

    @property
    def formatted_duration(self) -> str:
        if self.end_date is None:
            return f"Active since {_strip_leading_zero(self.start_date.strftime(ACTIVE_SINCE_FORMAT))}"
        start = _strip_leading_zero(self.start_date.strftime(DURATION_FORMAT))
        end = _strip_leading_zero(self.end_date.strftime(DURATION_FORMAT))
        return f"{start} - {end}"

    @classmethod
    def from_ongoing(cls, item: HabitWithMilestone, days: int) -> "AllTimeStreak":
        return cls(
            streak_in_days=days,
            milestone=item.milestone,
            start_date=item.habit.last_reset_at,
            end_date=None,
        )

    @classmethod
    def from_log(cls, log: HabitLog, milestone: MilestoneDefinition) -> "AllTimeStreak":
        return cls(
            streak_in_days=log.streak_duration,
            milestone=milestone,
            start_date=log.created_at - timedelta(days=log.streak_duration),
            end_date=log.created_at,
        )


def _strip_leading_zero(text: str) -> str:
    # Month is always first in both formats.
    return text[1:] if text.startswith("0") else text


def determine_highest_streak(
    ongoing: Optional[HabitWithMilestone],
    completed: Optional[HabitLog],
    table: MilestoneTable,
    now: Optional[datetime] = None,
) -> Optional[AllTimeStreak]:
    """Pick the all-time best streak.

    The ongoing streak wins only when strictly longer; ties go to the closed
    log. A result of zero days is not reported.
    """

    now = now or utc_now()
    if ongoing is None and completed is None:
        return None

    ongoing_days = ongoing.streak_in_days(now) if ongoing is not None else None
    completed_days = completed.streak_duration if completed is not None else None

    if (ongoing_days or 0) == 0 and (completed_days or 0) == 0:
        return None

    if ongoing is None:
        return AllTimeStreak.from_log(completed, table.classify(completed_days))
    if completed is None:
        return AllTimeStreak.from_ongoing(ongoing, ongoing_days)

    if ongoing_days > completed_days:
        return AllTimeStreak.from_ongoing(ongoing, ongoing_days)
    return AllTimeStreak.from_log(completed, table.classify(completed_days))


def all_time_streak(
    habits: Sequence[Habit],
    logs: Sequence[HabitLog],
    table: MilestoneTable,
    now: Optional[datetime] = None,
) -> Optional[AllTimeStreak]:
    """Compute the all-time best from plain snapshots."""

    now = now or utc_now()
    best_log = max(logs, key=lambda log: log.streak_duration, default=None)
    return determine_highest_streak(highest_ongoing(habits, table, now), best_log, table, now)


class AllTimeStreakAggregator:
    """Keeps the all-time best streak current as habits and logs change.

    Both sources are combined with latest-value semantics: an emission from
    either side recomputes the result from the newest value of both.
    """

    def __init__(
        self,
        habits: Observable[list[Habit]],
        logs: Observable[list[HabitLog]],
        table: MilestoneTable,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._table = table
        self._clock = clock
        self._lock = threading.Lock()
        self._result: Optional[AllTimeStreak] = None
        self._listeners: list[Callable[[Optional[AllTimeStreak]], None]] = []
        self._source = combine_latest(habits, logs, self._compute)
        self._subscription: Optional[Subscription] = None

    def _compute(self, habits: list[Habit], logs: list[HabitLog]) -> Optional[AllTimeStreak]:
        return all_time_streak(habits, logs, self._table, self._clock())

    def _on_result(self, result: Optional[AllTimeStreak]) -> None:
        with self._lock:
            self._result = result
            listeners = list(self._listeners)
        logger.debug(
            "All-time streak recomputed",
            extra={"streak_in_days": result.streak_in_days if result else None},
        )
        for listener in listeners:
            listener(result)

    def start(self) -> "AllTimeStreakAggregator":
        if self._subscription is None:
            self._subscription = self._source.subscribe(self._on_result)
        return self

    def subscribe(self, listener: Callable[[Optional[AllTimeStreak]], None]) -> Subscription:
        """Register a listener; it receives the current result immediately."""

        with self._lock:
            self._listeners.append(listener)
            started = self._subscription is not None
        if started:
            listener(self.current())
        else:
            self.start()

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return Subscription(_remove)

    def current(self) -> Optional[AllTimeStreak]:
        with self._lock:
            return self._result

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def __enter__(self) -> "AllTimeStreakAggregator":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "AllTimeStreak",
    "AllTimeStreakAggregator",
    "all_time_streak",
    "determine_highest_streak",
]
