"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


def _env_float(name: str, default: float) -> float:
    """Read a ratio in (0, 1] from the environment."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc
    if not 0 < parsed <= 1:
        raise ValueError(f"{name} must be in (0, 1], got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "TrackHabit"
    DB_FILENAME = "trackhabit.db"
    SQLITE_PRAGMAS = {"foreign_keys": "on"}

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.DATA_DIR = self._resolve_data_dir(data_dir)
        self.DEV_MODE = _env_bool("TRACKHABIT_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("TRACKHABIT_DATABASE_URL", self._build_sqlite_url())
        self.NOTIFIER_INTERVAL_DAYS = _env_int("TRACKHABIT_NOTIFIER_INTERVAL_DAYS", 6)
        self.NOTIFIER_THRESHOLD = _env_float("TRACKHABIT_NOTIFIER_THRESHOLD", 0.98)
        self.NOTIFIER_BACKOFF_SECONDS = _env_int("TRACKHABIT_NOTIFIER_BACKOFF_SECONDS", 300)
        self.NOTIFIER_MAX_RETRIES = _env_int("TRACKHABIT_NOTIFIER_MAX_RETRIES", 5)
        milestones_file = os.getenv("TRACKHABIT_MILESTONES_FILE")
        self.MILESTONES_FILE = Path(milestones_file).expanduser() if milestones_file else None

    def _resolve_data_dir(self, data_dir: Path | str | None = None) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = data_dir or os.getenv("TRACKHABIT_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to user-local storage.
            fallback_path = Path.home() / f".{self.APP_NAME.lower()}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the test-suite; never touches the real data dir."""

    DEBUG = False
    TESTING = True

    def __init__(self, data_dir: Path | str) -> None:
        super().__init__(data_dir)
        self.DEV_MODE = True
        self.DATABASE_URL = self._build_sqlite_url()
