"""Demo data for trying the CLI end-to-end."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ..infra.database import SessionFactory
from ..infra.live import ChangeNotifier
from ..models.habit import Habit, HabitLog, utc_now


@dataclass(frozen=True)
class SeedSummary:
    """Counts after seeding."""

    habits: int
    logs: int


# name, days since creation, current streak, closed streaks (oldest first)
_DEMO_HABITS: list[tuple[str, int, int, list[int]]] = [
    ("No Sugar", 400, 45, [120, 200]),
    ("No Social Media", 120, 29, [12, 40, 9]),
    ("No Smoking", 800, 358, [30, 365]),
    ("No Fast Food", 60, 6, [14, 3, 10]),
    ("No Snoozing", 20, 20, []),
    ("No Energy Drinks", 1200, 1098, [60]),
]


def _seed_habit(
    session: Session,
    name: str,
    age_days: int,
    current: int,
    closed: list[int],
    now: datetime,
) -> bool:
    if session.exec(select(Habit).where(Habit.name == name)).first() is not None:
        return False

    created_at = now - timedelta(days=age_days)
    last_reset_at = now - timedelta(days=current)
    habit = Habit(name=name, created_at=created_at, last_reset_at=last_reset_at)
    session.add(habit)
    session.flush()

    # Closed streaks end evenly spaced between creation and the current reset.
    span = max((last_reset_at - created_at).days, 0)
    step = span // max(len(closed), 1)
    for index, duration in enumerate(closed, start=1):
        ended_at = created_at + timedelta(days=step * index)
        if index == len(closed):
            ended_at = last_reset_at
        session.add(
            HabitLog(
                habit_id=habit.id,
                streak_duration=duration,
                created_at=ended_at,
                updated_at=ended_at,
                trigger="demo",
            )
        )
    return True


def run_demo_seed(
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
    changes: Optional[ChangeNotifier] = None,
) -> SeedSummary:
    """Insert demo habits idempotently (existing names are left alone).

    When ``changes`` is given, live queries are refreshed if anything was added.
    """

    now = now or utc_now()
    with session_factory() as session:
        inserted = [
            _seed_habit(session, name, age_days, current, closed, now)
            for name, age_days, current, closed in _DEMO_HABITS
        ]
        session.commit()
        habit_count = session.exec(select(func.count(Habit.id))).one()
        log_count = session.exec(select(func.count(HabitLog.id))).one()
    if changes is not None and any(inserted):
        changes.notify()
    return SeedSummary(habits=habit_count, logs=log_count)


__all__ = ["SeedSummary", "run_demo_seed"]
