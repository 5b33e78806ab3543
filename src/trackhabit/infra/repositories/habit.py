"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from ...errors import DuplicateHabitError
from ...models.habit import Habit, HabitLog
from ..database import SessionFactory
from ..live import ChangeNotifier, LiveQuery


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory, notifier: ChangeNotifier | None = None):
        """Initialize with a session factory and the notifier shared with live queries."""
        self.session_factory = session_factory
        self.notifier = notifier or ChangeNotifier()

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def get_by_name(self, name: str) -> Optional[Habit]:
        """Retrieve a habit by name."""
        with self.session_factory() as session:
            obj = session.exec(select(Habit).where(Habit.name == name)).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, include_inactive: bool = True) -> list[Habit]:
        """List habits ordered by id, optionally skipping inactive ones."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(Habit.id)  # type: ignore[arg-type]
            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self) -> list[Habit]:
        """List only active habits."""
        return self.list_all(include_inactive=False)

    def observe_all(self, include_inactive: bool = True) -> LiveQuery[list[Habit]]:
        """Live view of ``list_all``."""
        return LiveQuery(lambda: self.list_all(include_inactive=include_inactive), self.notifier)

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        try:
            with self.session_factory() as session:
                session.add(habit)
                session.commit()
                session.refresh(habit)
                session.expunge(habit)
        except IntegrityError as exc:
            raise DuplicateHabitError(habit.name) from exc
        self.notifier.notify()
        return habit

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        try:
            with self.session_factory() as session:
                merged = session.merge(habit)
                session.commit()
                session.refresh(merged)
                session.expunge(merged)
        except IntegrityError as exc:
            raise DuplicateHabitError(habit.name) from exc
        self.notifier.notify()
        return merged

    def delete(self, habit_id: int) -> None:
        """Delete a habit by ID together with its logs."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return
            for log in session.exec(select(HabitLog).where(HabitLog.habit_id == habit_id)).all():
                session.delete(log)
            session.flush()
            session.delete(habit)
            session.commit()
        self.notifier.notify()
