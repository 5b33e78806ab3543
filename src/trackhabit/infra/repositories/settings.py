"""Settings repository for app-level key/value pairs."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...domain.settings import SettingDefinition
from ...models.settings import AppSetting
from ..database import SessionFactory

_TRUE_VALUES = {"1", "true", "yes", "on"}


class SQLModelSettingsRepository:
    """SQLModel-based settings repository."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[AppSetting]:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                session.expunge(setting)
            return setting

    def set(self, key: str, value: str, description: str | None = None) -> AppSetting:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                setting.value = value
                if description is not None:
                    setting.description = description
            else:
                setting = AppSetting(key=key, value=value, description=description)
                session.add(setting)
            session.commit()
            session.refresh(setting)
            session.expunge(setting)
            return setting

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                session.delete(setting)
                session.commit()

    # Typed accessors
    def get_str(self, key: str, default: str = "") -> str:
        setting = self.get(key)
        return setting.value if setting else default

    def get_bool(self, key: str, default: bool = False) -> bool:
        setting = self.get(key)
        if setting is None:
            return default
        return setting.value.strip().lower() in _TRUE_VALUES

    def get_int(self, key: str, default: int = 0) -> int:
        setting = self.get(key)
        if setting is None:
            return default
        try:
            return int(setting.value)
        except ValueError:
            return default

    def set_str(self, key: str, value: str) -> None:
        self.set(key, value)

    def set_bool(self, key: str, value: bool) -> None:
        self.set(key, "true" if value else "false")

    def set_int(self, key: str, value: int) -> None:
        self.set(key, str(int(value)))

    def read(self, definition: SettingDefinition):
        """Read a registered setting, falling back to its default."""
        if definition.value_type is bool:
            return self.get_bool(definition.key, definition.default)
        if definition.value_type is int:
            return self.get_int(definition.key, definition.default)
        return self.get_str(definition.key, definition.default)

    def write(self, definition: SettingDefinition, value) -> None:
        if definition.value_type is bool:
            self.set_bool(definition.key, bool(value))
        elif definition.value_type is int:
            self.set_int(definition.key, int(value))
        else:
            self.set_str(definition.key, str(value))


__all__ = ["SQLModelSettingsRepository"]
