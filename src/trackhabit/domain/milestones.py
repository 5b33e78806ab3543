"""Milestone tiers and the streak classifier."""

from __future__ import annotations

import bisect
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from ..errors import TrackHabitError

UNBOUNDED_DAYS = 2**31 - 1


class NoMilestoneFound(TrackHabitError, LookupError):
    """Raised when no tier covers a day count (malformed table)."""

    def __init__(self, days: int):
        super().__init__(f"No milestone found for {days} days")
        self.days = days


class MilestoneTableError(TrackHabitError, ValueError):
    """Raised when a milestone table breaks the ordering/contiguity invariant."""


@dataclass(frozen=True)
class MilestoneDefinition:
    """A named tier covering the inclusive range ``[min_days, max_days]``."""

    title: str
    min_days: int
    max_days: int
    badge: str
    message: str

    @property
    def is_unbounded(self) -> bool:
        return self.max_days == UNBOUNDED_DAYS

    def contains(self, days: int) -> bool:
        return self.min_days <= days <= self.max_days


DEFAULT_MILESTONES: tuple[MilestoneDefinition, ...] = (
    MilestoneDefinition(
        "First Step", 0, 6, "badge_first_step",
        "Every journey begins with a single step. You've started yours.",
    ),
    MilestoneDefinition(
        "Week Warrior", 7, 13, "badge_week_warrior",
        "A full week down. The hardest days are behind you.",
    ),
    MilestoneDefinition(
        "Fortnight Fighter", 14, 20, "badge_shield",
        "Two weeks strong. Your resolve is becoming a shield.",
    ),
    MilestoneDefinition(
        "21 Savage", 21, 29, "badge_rapper",
        "Three weeks in. They say that's how long a habit takes to form.",
    ),
    MilestoneDefinition(
        "Monthly Master", 30, 59, "badge_calendar",
        "A whole month. Flip the calendar with pride.",
    ),
    MilestoneDefinition(
        "Habit Hacker", 60, 89, "badge_keyboard",
        "Two months. You've rewritten your own routine.",
    ),
    MilestoneDefinition(
        "Quarterly Champion", 90, 99, "badge_trophy",
        "A full quarter. Champions are made of days like these.",
    ),
    MilestoneDefinition(
        "Centennial Gemstone", 100, 149, "badge_gemstone",
        "Triple digits. Pressure makes diamonds.",
    ),
    MilestoneDefinition(
        "Zen Achiever", 150, 179, "badge_lotus_flower",
        "One hundred and fifty days of calm consistency.",
    ),
    MilestoneDefinition(
        "Half-Year Hero", 180, 269, "badge_hero",
        "Six months. Heroes are just people who kept going.",
    ),
    MilestoneDefinition(
        "Endurance Champion", 270, 364, "badge_stopwatch",
        "Nine months on the clock and still running.",
    ),
    MilestoneDefinition(
        "One-Year Legend", 365, 399, "badge_crown",
        "A full trip around the sun. Wear the crown.",
    ),
    MilestoneDefinition(
        "Nietzsche's Übermensch", 400, 454, "badge_mustache",
        "What did not break you made you stronger.",
    ),
    MilestoneDefinition(
        "Socrates' Apprentice", 455, 544, "badge_scroll",
        "You know yourself better than ever.",
    ),
    MilestoneDefinition(
        "Plato's Pupil", 545, 634, "badge_book",
        "You've stepped out of the cave for good.",
    ),
    MilestoneDefinition(
        "Aristotle's Achiever", 635, 729, "badge_quill",
        "Excellence is not an act, but a habit. Yours.",
    ),
    MilestoneDefinition(
        "Two-Year Titan", 730, 819, "badge_mountain",
        "Two years. You've moved mountains.",
    ),
    MilestoneDefinition(
        "Enlightened One", 820, 909, "badge_star",
        "Clarity comes to those who persist.",
    ),
    MilestoneDefinition(
        "Cosmic Voyager", 910, 999, "badge_meteor",
        "Your streak is leaving the atmosphere.",
    ),
    MilestoneDefinition(
        "Divine Habit Master", 1000, 1094, "badge_angel",
        "A thousand days. Few mortals get here.",
    ),
    MilestoneDefinition(
        "Habit Oracle", 1095, UNBOUNDED_DAYS, "badge_crystal_ball",
        "Three years and beyond. You see the future because you built it.",
    ),
)


class MilestoneTable:
    """Ordered, read-only catalog of milestone tiers."""

    def __init__(self, definitions: Iterable[MilestoneDefinition] = DEFAULT_MILESTONES):
        self._definitions: tuple[MilestoneDefinition, ...] = tuple(definitions)
        self._lower_bounds = [definition.min_days for definition in self._definitions]

    @classmethod
    def from_json(cls, path: Path | str) -> "MilestoneTable":
        """Load a table from a JSON list of objects.

        Each object needs ``title``, ``min_days`` and ``max_days``; ``badge`` and
        ``message`` default to empty strings. A ``max_days`` of ``null`` marks the
        unbounded last tier.
        """

        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise MilestoneTableError(f"{path}: expected a JSON list of milestones")
        definitions = []
        for index, item in enumerate(raw):
            try:
                max_days = item.get("max_days")
                definitions.append(
                    MilestoneDefinition(
                        title=str(item["title"]),
                        min_days=int(item["min_days"]),
                        max_days=UNBOUNDED_DAYS if max_days is None else int(max_days),
                        badge=str(item.get("badge", "")),
                        message=str(item.get("message", "")),
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise MilestoneTableError(f"{path}: invalid milestone at index {index}") from exc
        return cls(definitions)

    def __iter__(self) -> Iterator[MilestoneDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __getitem__(self, index: int) -> MilestoneDefinition:
        return self._definitions[index]

    def all(self) -> Sequence[MilestoneDefinition]:
        """Return every tier in ascending order."""
        return self._definitions

    def validate(self) -> "MilestoneTable":
        """Check the table is sorted, contiguous, starts at 0 and ends unbounded."""

        if not self._definitions:
            raise MilestoneTableError("Milestone table is empty")
        first = self._definitions[0]
        if first.min_days != 0:
            raise MilestoneTableError(f"First milestone must start at 0, got {first.min_days}")
        for previous, current in zip(self._definitions, self._definitions[1:]):
            if previous.min_days > previous.max_days:
                raise MilestoneTableError(f"{previous.title!r} has an inverted range")
            if current.min_days != previous.max_days + 1:
                raise MilestoneTableError(
                    f"{current.title!r} does not follow {previous.title!r} contiguously"
                )
        if not self._definitions[-1].is_unbounded:
            raise MilestoneTableError("Last milestone must be unbounded")
        return self

    def classify(self, days: int) -> MilestoneDefinition:
        """Return the tier with ``min_days <= days <= max_days``.

        Raises:
            NoMilestoneFound: when the table has no tier for ``days``.
        """

        index = bisect.bisect_right(self._lower_bounds, days) - 1
        if index >= 0:
            candidate = self._definitions[index]
            if candidate.contains(days):
                return candidate
        raise NoMilestoneFound(days)

    def next_after(self, milestone: MilestoneDefinition) -> Optional[MilestoneDefinition]:
        """Return the tier following ``milestone``, or None for the last tier."""

        try:
            index = self._definitions.index(milestone)
        except ValueError:
            return None
        if index + 1 < len(self._definitions):
            return self._definitions[index + 1]
        return None


DEFAULT_TABLE = MilestoneTable(DEFAULT_MILESTONES)


__all__ = [
    "DEFAULT_MILESTONES",
    "DEFAULT_TABLE",
    "MilestoneDefinition",
    "MilestoneTable",
    "MilestoneTableError",
    "NoMilestoneFound",
    "UNBOUNDED_DAYS",
]
