"""Pytest configuration and shared fixtures for TrackHabit tests.

Every test gets its own SQLite file under ``tmp_path`` and a fixed clock, so
streak lengths are deterministic and the real data directory is never touched.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone

import pytest

from trackhabit.config import TestingConfig
from trackhabit.infra.database import create_db_engine, create_session_factory, init_database
from trackhabit.infra.live import ChangeNotifier
from trackhabit.infra.repositories import (
    SQLModelHabitLogRepository,
    SQLModelHabitRepository,
    SQLModelSettingsRepository,
)
from trackhabit.models import Habit, HabitLog

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Drop TRACKHABIT_* variables so local .env files cannot leak into tests."""

    for key in list(os.environ):
        if key.startswith("TRACKHABIT_"):
            monkeypatch.delenv(key, raising=False)
    yield
    package_logger = logging.getLogger("trackhabit")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def now() -> datetime:
    """The fixed "current time" used by streak calculations."""
    return NOW


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def test_config(tmp_path) -> TestingConfig:
    return TestingConfig(tmp_path)


@pytest.fixture
def db_engine(test_config):
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: engine with every table created and foreign keys enforced
    """
    engine = create_db_engine(test_config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def changes() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def habit_repo(session_factory, changes) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory, changes)


@pytest.fixture
def log_repo(session_factory, changes) -> SQLModelHabitLogRepository:
    return SQLModelHabitLogRepository(session_factory, changes)


@pytest.fixture
def settings_repo(session_factory) -> SQLModelSettingsRepository:
    return SQLModelSettingsRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def make_habit():
    """Factory for unsaved habits, for pure computations that need no database.

    Returns:
        Callable: ``make_habit(habit_id, name, streak_days, ...)``
    """

    def _make_habit(
        habit_id: int,
        name: str = "Test Habit",
        streak_days: int = 0,
        created_days_ago: int | None = None,
        is_active: bool = True,
    ) -> Habit:
        created_days_ago = streak_days if created_days_ago is None else created_days_ago
        return Habit(
            id=habit_id,
            name=name,
            created_at=NOW - timedelta(days=created_days_ago),
            last_reset_at=NOW - timedelta(days=streak_days),
            is_active=is_active,
        )

    return _make_habit


@pytest.fixture
def habit_factory(habit_repo):
    """Factory for persisted habits whose current streak is ``streak_days`` at NOW.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        streak_days: int = 0,
        created_days_ago: int | None = None,
        is_active: bool = True,
    ) -> Habit:
        created_days_ago = streak_days if created_days_ago is None else created_days_ago
        return habit_repo.create(
            Habit(
                name=name,
                created_at=NOW - timedelta(days=created_days_ago),
                last_reset_at=NOW - timedelta(days=streak_days),
                is_active=is_active,
            )
        )

    return _create_habit


@pytest.fixture
def log_factory(log_repo):
    """Factory for persisted closed streaks.

    Returns:
        Callable: ``log_factory(habit, streak_duration, ended_days_ago=0)``
    """

    def _create_log(
        habit: Habit,
        streak_duration: int,
        ended_days_ago: int = 0,
        trigger: str | None = None,
    ) -> HabitLog:
        ended_at = NOW - timedelta(days=ended_days_ago)
        return log_repo.create(
            HabitLog(
                habit_id=habit.id,
                streak_duration=streak_duration,
                created_at=ended_at,
                updated_at=ended_at,
                trigger=trigger,
            )
        )

    return _create_log
