"""SQLModel implementation of the habit log repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import col, select

from ...errors import HabitNotFoundError
from ...models.habit import Habit, HabitLog
from ..database import SessionFactory
from ..live import ChangeNotifier, LiveQuery


class SQLModelHabitLogRepository:
    """Closed-streak records backed by SQLModel."""

    def __init__(self, session_factory: SessionFactory, notifier: ChangeNotifier | None = None):
        self.session_factory = session_factory
        self.notifier = notifier or ChangeNotifier()

    def get_by_id(self, log_id: int) -> Optional[HabitLog]:
        with self.session_factory() as session:
            obj = session.get(HabitLog, log_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_habit(self, habit_id: int) -> list[HabitLog]:
        """Logs for one habit, newest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .order_by(col(HabitLog.created_at).desc(), col(HabitLog.id).desc())
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def observe_for_habit(self, habit_id: int) -> LiveQuery[list[HabitLog]]:
        return LiveQuery(lambda: self.list_for_habit(habit_id), self.notifier)

    def longest_for_habit(self, habit_id: int) -> Optional[HabitLog]:
        """The longest closed streak of one habit, or None."""
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .order_by(
                    col(HabitLog.streak_duration).desc(),
                    col(HabitLog.created_at),
                    col(HabitLog.id),
                )
                .limit(1)
            )
            obj = session.exec(statement).first()
            if obj:
                session.expunge(obj)
            return obj

    def observe_longest_for_habit(self, habit_id: int) -> LiveQuery[Optional[HabitLog]]:
        return LiveQuery(lambda: self.longest_for_habit(habit_id), self.notifier)

    def list_all(self) -> list[HabitLog]:
        """Every log, longest streak first (ties: earliest written first)."""
        with self.session_factory() as session:
            statement = select(HabitLog).order_by(
                col(HabitLog.streak_duration).desc(),
                col(HabitLog.created_at),
                col(HabitLog.id),
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def observe_all(self) -> LiveQuery[list[HabitLog]]:
        return LiveQuery(self.list_all, self.notifier)

    def create(self, log: HabitLog) -> HabitLog:
        with self.session_factory() as session:
            session.add(log)
            session.commit()
            session.refresh(log)
            session.expunge(log)
        self.notifier.notify()
        return log

    def update(self, log: HabitLog) -> HabitLog:
        with self.session_factory() as session:
            merged = session.merge(log)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
        self.notifier.notify()
        return merged

    def record_reset(self, log: HabitLog, reset_at: datetime) -> HabitLog:
        """Insert ``log`` and move its habit's ``last_reset_at`` in one transaction."""
        with self.session_factory() as session:
            habit = session.get(Habit, log.habit_id)
            if habit is None:
                raise HabitNotFoundError(log.habit_id)
            habit.last_reset_at = reset_at
            session.add(habit)
            session.add(log)
            session.commit()
            session.refresh(log)
            session.expunge(log)
        self.notifier.notify()
        return log
