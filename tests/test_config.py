"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from trackhabit import config as config_module


def test_defaults(tmp_path):
    config = config_module.BaseConfig(tmp_path)

    assert config.DATA_DIR == tmp_path.resolve()
    assert config.DATABASE_URL == f"sqlite:///{tmp_path.resolve() / 'trackhabit.db'}"
    assert config.NOTIFIER_INTERVAL_DAYS == 6
    assert config.NOTIFIER_THRESHOLD == pytest.approx(0.98)
    assert config.NOTIFIER_BACKOFF_SECONDS == 300
    assert config.NOTIFIER_MAX_RETRIES == 5
    assert config.MILESTONES_FILE is None


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("TRACKHABIT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("TRACKHABIT_NOTIFIER_INTERVAL_DAYS", "2")
    monkeypatch.setenv("TRACKHABIT_NOTIFIER_THRESHOLD", "0.9")
    monkeypatch.setenv("TRACKHABIT_DEV_MODE", "false")
    monkeypatch.setenv("TRACKHABIT_MILESTONES_FILE", str(tmp_path / "tiers.json"))

    config = config_module.BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.is_dir()
    assert config.NOTIFIER_INTERVAL_DAYS == 2
    assert config.NOTIFIER_THRESHOLD == pytest.approx(0.9)
    assert config.DEV_MODE is False
    assert config.MILESTONES_FILE == Path(tmp_path / "tiers.json")


@pytest.mark.parametrize(
    "name, value",
    [
        ("TRACKHABIT_NOTIFIER_INTERVAL_DAYS", "zero"),
        ("TRACKHABIT_NOTIFIER_INTERVAL_DAYS", "0"),
        ("TRACKHABIT_NOTIFIER_MAX_RETRIES", "-2"),
        ("TRACKHABIT_NOTIFIER_THRESHOLD", "1.5"),
        ("TRACKHABIT_NOTIFIER_THRESHOLD", "high"),
    ],
)
def test_invalid_numbers_raise(tmp_path, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        config_module.BaseConfig(tmp_path)


def test_testing_config_ignores_database_url(tmp_path, monkeypatch):
    monkeypatch.setenv("TRACKHABIT_DATABASE_URL", "sqlite:////elsewhere.db")

    config = config_module.TestingConfig(tmp_path)

    assert config.DATABASE_URL.endswith("trackhabit.db")
    assert str(tmp_path.resolve()) in config.DATABASE_URL
    assert config.DEV_MODE is True


def test_sqlite_engine_options(tmp_path):
    options = config_module.BaseConfig(tmp_path).sqlalchemy_engine_options()
    assert options["connect_args"] == {"check_same_thread": False}
