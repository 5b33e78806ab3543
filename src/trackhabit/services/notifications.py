"""Notification sinks for milestone reminders."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from ..models.habit import Habit
from .streaks import censor_name

logger = logging.getLogger("trackhabit.notifications")

NOTIFICATION_ID = 1
DEFAULT_HISTORY = 50


@dataclass(frozen=True)
class Notification:
    """Rendered reminder text."""

    title: str
    text: str
    notification_id: int = NOTIFICATION_ID


def single_habit_notification(habit_name: str) -> Notification:
    return Notification(
        title="A new milestone is close!",
        text=f"{habit_name} is about to reach a new milestone. Keep going!",
    )


def habit_count_notification(count: int) -> Notification:
    return Notification(
        title="New milestones are close!",
        text=f"{count} habits are about to reach a new milestone. Keep going!",
    )


class NotificationSink(Protocol):
    """Where milestone reminders go."""

    def is_enabled(self) -> bool:
        ...

    def notify_single(self, habit: Habit) -> None:
        ...

    def notify_count(self, count: int) -> None:
        ...


class LoggingNotificationSink:
    """Delivers reminders to the application log (and an optional callback).

    ``sent`` holds the most recent ``history`` notifications, oldest first.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        censor_names: Callable[[], bool] | bool = False,
        deliver: Callable[[Notification], None] | None = None,
        history: int = DEFAULT_HISTORY,
    ):
        if history < 1:
            raise ValueError("history must be at least 1")
        self.enabled = enabled
        self._censor_names = censor_names
        self._deliver = deliver
        self.history = history
        self.sent: list[Notification] = []

    def is_enabled(self) -> bool:
        return self.enabled

    def _should_censor(self) -> bool:
        if callable(self._censor_names):
            return bool(self._censor_names())
        return bool(self._censor_names)

    def _emit(self, notification: Notification) -> None:
        self.sent.append(notification)
        del self.sent[:-self.history]
        logger.info(
            notification.text,
            extra={"notification_id": notification.notification_id, "title": notification.title},
        )
        if self._deliver is not None:
            self._deliver(notification)

    def notify_single(self, habit: Habit) -> None:
        name = censor_name(habit.name) if self._should_censor() else habit.name
        self._emit(single_habit_notification(name))

    def notify_count(self, count: int) -> None:
        self._emit(habit_count_notification(count))


__all__ = [
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "habit_count_notification",
    "single_habit_notification",
]
