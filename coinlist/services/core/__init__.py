"""Общие сервисы: хранилище настроек и тема."""

from .storage import KeyValueStore, StorageAdapter, StorageError
from .theme import DEFAULT_THEME, THEME_KEY, ThemeService

__all__ = [
    "DEFAULT_THEME",
    "KeyValueStore",
    "StorageAdapter",
    "StorageError",
    "THEME_KEY",
    "ThemeService",
]
