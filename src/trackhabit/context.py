"""Application context for dependency injection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .domain.milestones import DEFAULT_TABLE, MilestoneTable
from .domain.settings import CENSOR_HABIT_NAMES
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.live import ChangeNotifier
from .infra.repositories import (
    SQLModelHabitLogRepository,
    SQLModelHabitRepository,
    SQLModelSettingsRepository,
)
from .services.notifications import LoggingNotificationSink, NotificationSink
from .services.notifier import MilestoneNotifier

logger = logging.getLogger("trackhabit.context")


@dataclass
class AppContext:
    """Everything a command or job needs, wired once at start-up."""

    # Configuration
    config: BaseConfig
    milestones: MilestoneTable

    # Persistence
    engine: Engine
    session_factory: SessionFactory
    changes: ChangeNotifier

    # Repositories
    habit_repo: SQLModelHabitRepository
    log_repo: SQLModelHabitLogRepository
    settings_repo: SQLModelSettingsRepository

    # Notifications
    sink: NotificationSink
    notifier: MilestoneNotifier

    dev_mode: bool = False

    def censor_names(self) -> bool:
        return self.settings_repo.read(CENSOR_HABIT_NAMES)


def load_milestone_table(config: BaseConfig) -> MilestoneTable:
    """Return the configured milestone table, validated."""

    if config.MILESTONES_FILE is None:
        return DEFAULT_TABLE.validate()
    table = MilestoneTable.from_json(config.MILESTONES_FILE).validate()
    logger.info(
        "Loaded milestone table",
        extra={"path": str(config.MILESTONES_FILE), "tiers": len(table)},
    )
    return table


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    sink: Optional[NotificationSink] = None,
) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    milestones = load_milestone_table(config)

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    # Habit and log writes both refresh every live query.
    changes = ChangeNotifier()
    habit_repo = SQLModelHabitRepository(session_factory, changes)
    log_repo = SQLModelHabitLogRepository(session_factory, changes)
    settings_repo = SQLModelSettingsRepository(session_factory)

    if sink is None:
        sink = LoggingNotificationSink(censor_names=lambda: settings_repo.read(CENSOR_HABIT_NAMES))

    notifier = MilestoneNotifier(
        habit_repo,
        settings_repo,
        sink,
        milestones,
        threshold=config.NOTIFIER_THRESHOLD,
    )

    return AppContext(
        config=config,
        milestones=milestones,
        engine=engine,
        session_factory=session_factory,
        changes=changes,
        habit_repo=habit_repo,
        log_repo=log_repo,
        settings_repo=settings_repo,
        sink=sink,
        notifier=notifier,
        dev_mode=config.DEV_MODE,
    )


__all__ = ["AppContext", "create_app_context", "load_milestone_table"]
