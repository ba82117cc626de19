"""Сборка зависимостей coinlist (вместо глобальных синглтонов модулей)."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from config.settings import AppSettings, get_settings
from .database import build_engine, build_session_maker, init_db
from .logging_config import setup_logging
from .services.core.storage import StorageAdapter
from .services.core.theme import ThemeService
from .services.crypto import (
    CoinloreClient,
    CryptoController,
    ItemCacheStore,
    PaginatedCacheStore,
)
from .services.crypto.controller import Notifier
from .utils.cache import get_cache
from .utils.i18n import MessageCatalog


@dataclass(slots=True)
class AppContext:
    """Все сервисы процесса; закрывается через close()."""

    settings: AppSettings
    client: CoinloreClient
    page_store: PaginatedCacheStore
    item_store: ItemCacheStore
    controller: CryptoController
    storage: StorageAdapter
    theme: ThemeService
    engine: AsyncEngine

    async def close(self) -> None:
        """Мягкое выключение: HTTP-сессия и движок БД."""

        await self.client.close()
        await self.engine.dispose()
        logger.info("coinlist корректно остановлен")


async def build_context(
    settings: AppSettings | None = None,
    *,
    notifier: Notifier | None = None,
    configure_logging: bool = False,
) -> AppContext:
    """Поднимает клиента, сторы, контроллер и хранилище настроек."""

    settings = settings or get_settings()
    if configure_logging:
        setup_logging(json=settings.log_json, level=settings.log_level)
    logger.info("coinlist стартует в окружении {env}", env=settings.environment)

    client = CoinloreClient(settings.api)
    await client.start()
    cache = get_cache()
    page_store = PaginatedCacheStore(client, cache, stale_time=settings.query.stale_time_sec)
    item_store = ItemCacheStore(client, cache, stale_time=settings.query.detail_stale_time_sec)
    messages = MessageCatalog(settings.localization)
    controller = CryptoController(
        page_store,
        item_store,
        messages=messages,
        notifier=notifier,
        locale=messages.default_locale,
    )

    engine = build_engine(settings.database)
    await init_db(engine)
    storage = StorageAdapter(build_session_maker(engine))

    logger.debug("build_context завершён, ядро готово")
    return AppContext(
        settings=settings,
        client=client,
        page_store=page_store,
        item_store=item_store,
        controller=controller,
        storage=storage,
        theme=ThemeService(storage),
        engine=engine,
    )


__all__ = ["AppContext", "build_context"]
