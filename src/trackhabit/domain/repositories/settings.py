"""Settings repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.settings import AppSetting
from ..settings import SettingDefinition


class SettingsRepository(Protocol):
    """Typed key/value persistence."""

    def get(self, key: str) -> Optional[AppSetting]:
        ...

    def set(self, key: str, value: str, description: str | None = None) -> AppSetting:
        ...

    def delete(self, key: str) -> None:
        ...

    def get_str(self, key: str, default: str = "") -> str:
        ...

    def get_bool(self, key: str, default: bool = False) -> bool:
        ...

    def get_int(self, key: str, default: int = 0) -> int:
        ...

    def set_str(self, key: str, value: str) -> None:
        ...

    def set_bool(self, key: str, value: bool) -> None:
        ...

    def set_int(self, key: str, value: int) -> None:
        ...

    def read(self, definition: SettingDefinition):
        """Read a registered setting, falling back to its default."""
        ...

    def write(self, definition: SettingDefinition, value) -> None:
        ...
