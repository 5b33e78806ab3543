"""Sort keys for habit collections."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SortKey(str, Enum):
    NAME = "name"
    CREATION = "creation"
    STREAK = "streak"


@dataclass(frozen=True)
class SortOrder:
    """A sort key plus direction."""

    key: SortKey = SortKey.STREAK
    ascending: bool = True

    @classmethod
    def by_name(cls, ascending: bool = True) -> "SortOrder":
        return cls(SortKey.NAME, ascending)

    @classmethod
    def by_creation(cls, ascending: bool = True) -> "SortOrder":
        return cls(SortKey.CREATION, ascending)

    @classmethod
    def by_streak(cls, ascending: bool = True) -> "SortOrder":
        return cls(SortKey.STREAK, ascending)


__all__ = ["SortKey", "SortOrder"]
