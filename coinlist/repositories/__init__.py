"""Репозитории для работы с БД."""

from .settings_repo import delete_setting, get_setting, upsert_setting

__all__ = [
    "delete_setting",
    "get_setting",
    "upsert_setting",
]
