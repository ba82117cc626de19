"""Тема оформления (light/dark), переживающая перезапуск."""

from __future__ import annotations

from typing import Literal

from loguru import logger

from .storage import KeyValueStore

Theme = Literal["light", "dark"]

THEME_KEY = "theme"
DEFAULT_THEME: Theme = "light"


class ThemeService:
    def __init__(self, storage: KeyValueStore) -> None:
        self._storage = storage

    async def get_theme(self) -> Theme:
        value = await self._storage.get_item(THEME_KEY)
        if value in ("light", "dark"):
            return value  # type: ignore[return-value]
        if value is not None:
            logger.debug("Неизвестная тема {value}, используем {default}", value=value, default=DEFAULT_THEME)
        return DEFAULT_THEME

    async def set_theme(self, theme: Theme) -> None:
        if theme not in ("light", "dark"):
            raise ValueError(f"Неизвестная тема: {theme}")
        await self._storage.set_item(THEME_KEY, theme)

    async def toggle(self) -> Theme:
        """Переключает тему, как свитчер в шапке списка."""

        theme: Theme = "dark" if await self.get_theme() == "light" else "light"
        await self.set_theme(theme)
        return theme


__all__ = ["DEFAULT_THEME", "THEME_KEY", "Theme", "ThemeService"]
