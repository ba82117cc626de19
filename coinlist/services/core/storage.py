"""Ключ-значение хранилище межсессионных настроек поверх SQLModel."""

from __future__ import annotations

from typing import Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from coinlist.repositories import delete_setting, get_setting, upsert_setting


class StorageError(RuntimeError):
    """Не удалось записать или удалить значение."""


class KeyValueStore(Protocol):
    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...


class StorageAdapter:
    """Чтение никогда не падает (None), запись и удаление поднимают StorageError."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def get_item(self, key: str) -> str | None:
        try:
            async with self._session_maker() as session:
                setting = await get_setting(session, key)
        except SQLAlchemyError as exc:
            logger.warning("Чтение настройки {key} упало: {error}", key=key, error=exc)
            return None
        return setting.value if setting else None

    async def set_item(self, key: str, value: str) -> None:
        try:
            async with self._session_maker() as session:
                await upsert_setting(session, key, value)
        except SQLAlchemyError as exc:
            raise StorageError(f"Error setting item {key} {value}") from exc

    async def remove_item(self, key: str) -> None:
        try:
            async with self._session_maker() as session:
                await delete_setting(session, key)
        except SQLAlchemyError as exc:
            logger.error("Удаление настройки {key} упало: {error}", key=key, error=exc)
            raise StorageError(f"Error removing item {key}") from exc


__all__ = ["KeyValueStore", "StorageAdapter", "StorageError"]
