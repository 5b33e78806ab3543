"""Service module exports."""

from . import (
    all_time,
    habits,
    intensity,
    notifications,
    notifier,
    seed,
    streaks,
    summaries,
)

__all__ = [
    "all_time",
    "habits",
    "intensity",
    "notifications",
    "notifier",
    "seed",
    "streaks",
    "summaries",
]
