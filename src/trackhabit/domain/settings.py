"""Setting definitions and the persisted notified-milestone state format."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Generic, Iterable, Optional, TypeVar

logger = logging.getLogger("trackhabit.domain.settings")

T = TypeVar("T", str, bool, int)


@dataclass(frozen=True)
class SettingDefinition(Generic[T]):
    """A typed key with its default value."""

    key: str
    default: T
    description: Optional[str] = None

    @property
    def value_type(self) -> type:
        return type(self.default)


CENSOR_HABIT_NAMES: SettingDefinition[bool] = SettingDefinition(
    key="censor_habit_names",
    default=False,
    description="Mask habit names in listings and notifications",
)

NOTIFICATIONS_ENABLED: SettingDefinition[bool] = SettingDefinition(
    key="notifications_enabled",
    default=True,
    description="Send milestone reminders",
)

LAST_NOTIFIED_STREAKS: SettingDefinition[str] = SettingDefinition(
    key="last_notified_streaks",
    default="",
    description="Habits included in the last milestone reminder",
)


def general_settings() -> list[SettingDefinition]:
    """Return the user-facing settings."""
    return [CENSOR_HABIT_NAMES, NOTIFICATIONS_ENABLED]


NOTIFIED_STATE_VERSION = 1


@dataclass(frozen=True)
class NotifiedMilestoneState:
    """Habit ids included in the most recent reminder.

    Ids are kept sorted and unique, so two states compare equal whenever they
    name the same set of habits.
    """

    habit_ids: tuple[int, ...] = ()

    @classmethod
    def of(cls, habit_ids: Iterable[int]) -> "NotifiedMilestoneState":
        return cls(tuple(sorted({int(habit_id) for habit_id in habit_ids})))

    def is_empty(self) -> bool:
        return not self.habit_ids


def encode_notified_state(state: NotifiedMilestoneState) -> str:
    """Serialize to ``{"version": 1, "habit_ids": [...]}``."""

    return json.dumps(
        {"version": NOTIFIED_STATE_VERSION, "habit_ids": list(state.habit_ids)},
        separators=(",", ":"),
    )


def decode_notified_state(raw: Optional[str]) -> NotifiedMilestoneState:
    """Parse a stored state; anything unreadable decodes to the empty state.

    Bare JSON arrays of ids are accepted as well.
    """

    if raw is None or not raw.strip():
        return NotifiedMilestoneState()
    try:
        payload = json.loads(raw)
        if isinstance(payload, list):
            return NotifiedMilestoneState.of(payload)
        if not isinstance(payload, dict):
            raise ValueError("expected an object")
        version = payload.get("version")
        if version != NOTIFIED_STATE_VERSION:
            raise ValueError(f"unsupported version {version!r}")
        habit_ids = payload.get("habit_ids", [])
        if not isinstance(habit_ids, list):
            raise ValueError("habit_ids must be a list")
        return NotifiedMilestoneState.of(habit_ids)
    except (ValueError, TypeError) as exc:
        logger.warning(
            "Discarding unreadable notified milestone state",
            extra={"error": str(exc)},
        )
        return NotifiedMilestoneState()


__all__ = [
    "CENSOR_HABIT_NAMES",
    "LAST_NOTIFIED_STREAKS",
    "NOTIFICATIONS_ENABLED",
    "NOTIFIED_STATE_VERSION",
    "NotifiedMilestoneState",
    "SettingDefinition",
    "decode_notified_state",
    "encode_notified_state",
    "general_settings",
]
