"""Стор страниц списка: кеш по QueryKey, дедупликация запросов, устаревание.

Страницы хранятся в aiocache под ключом линии (QueryKey без клиентского
фильтра). Запись CacheEntry неизменяема и заменяется целиком, поэтому читатель
никогда не увидит наполовину дописанный список страниц.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from aiocache.base import BaseCache
from loguru import logger

from config.settings import get_settings
from coinlist.utils.cache import get_cache, remaining_ttl
from .coinlore_client import RemoteFetchClient
from .errors import FetchError, NetworkError
from .normalizer import normalize_list_page
from .records import CacheEntry, PageRecord, QueryKey

InflightSlot = tuple[str, int]


class PaginatedCacheStore:
    """Кеш страниц списка, общий для всех контроллеров процесса."""

    def __init__(
        self,
        client: RemoteFetchClient,
        cache: BaseCache | None = None,
        *,
        stale_time: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._cache = cache if cache is not None else get_cache()
        self._stale_time = (
            stale_time if stale_time is not None else get_settings().query.stale_time_sec
        )
        self._clock = clock
        self._lock = asyncio.Lock()
        self._inflight: dict[InflightSlot, asyncio.Task[PageRecord]] = {}
        self._known_keys: set[str] = set()

    @property
    def stale_time(self) -> float:
        return self._stale_time

    @property
    def tracked_keys(self) -> frozenset[str]:
        """Ключи линий, которые стор считает живыми в бэкенде."""

        return frozenset(self._known_keys)

    async def get_or_fetch(self, key: QueryKey, page_number: int) -> PageRecord:
        """Страница из свежего кеша либо из сети (с нормализацией и сохранением)."""

        if page_number < 1:
            raise ValueError(f"page_number должен быть >= 1, получено {page_number}")
        lineage = key.lineage()
        entry = await self.peek(lineage)
        if entry is not None:
            page = entry.page(page_number)
            if page is not None:
                logger.trace(
                    "Страница {page} для {key} взята из кеша",
                    page=page_number,
                    key=lineage.cache_key,
                )
                return page
        return await self._fetch_once(lineage, page_number)

    async def peek(self, key: QueryKey) -> CacheEntry | None:
        """Свежая запись линии без сетевых вызовов; устаревшая удаляется целиком."""

        lineage = key.lineage()
        entry: CacheEntry | None = await self._cache.get(lineage.cache_key)
        if entry is None:
            # запись могла истечь по TTL бэкенда
            self._known_keys.discard(lineage.cache_key)
            return None
        if entry.is_stale(self._clock(), self._stale_time):
            await self._evict_stale(lineage, entry)
            return None
        return entry

    async def append_page(self, key: QueryKey, page: PageRecord) -> CacheEntry | None:
        """Атомарно добавляет страницу в линию.

        Новую линию начинает только первая страница. Страница N > 1 без свежей
        линии не сохраняется (возвращается None): иначе в кеше появилась бы
        "свежая" линия без начала.
        """

        lineage = key.lineage()
        async with self._lock:
            now = self._clock()
            entry: CacheEntry | None = await self._cache.get(lineage.cache_key)
            if entry is None or entry.is_stale(now, self._stale_time):
                if page.current_page != 1:
                    logger.info(
                        "Страница {page} для {key} не сохранена: линия устарела или отсутствует",
                        page=page.current_page,
                        key=lineage.cache_key,
                    )
                    return None
                entry = CacheEntry(key=lineage, fetched_at=now)
            entry = entry.with_page(page)
            await self._cache.set(
                lineage.cache_key,
                entry,
                ttl=remaining_ttl(self._stale_time, now - entry.fetched_at),
            )
            self._known_keys.add(lineage.cache_key)
        return entry

    async def invalidate(self, key: QueryKey) -> None:
        """Сбрасывает все страницы линии (следующее обращение начнёт с page 1)."""

        lineage = key.lineage()
        async with self._lock:
            await self._cache.delete(lineage.cache_key)
            self._known_keys.discard(lineage.cache_key)
        logger.debug("Линия {key} инвалидирована", key=lineage.cache_key)

    async def clear(self) -> None:
        """Удаляет все линии, записанные этим стором."""

        async with self._lock:
            for cache_key in tuple(self._known_keys):
                await self._cache.delete(cache_key)
            self._known_keys.clear()

    def in_flight(self, key: QueryKey, page_number: int | None = None) -> bool:
        """Есть ли незавершённый сетевой запрос для линии (или конкретной страницы)."""

        cache_key = key.lineage().cache_key
        return any(
            slot_key == cache_key and (page_number is None or slot_page == page_number)
            for slot_key, slot_page in self._inflight
        )

    async def _evict_stale(self, lineage: QueryKey, entry: CacheEntry) -> None:
        async with self._lock:
            current = await self._cache.get(lineage.cache_key)
            if current is not entry:
                return
            await self._cache.delete(lineage.cache_key)
            self._known_keys.discard(lineage.cache_key)
        logger.info(
            "Линия {key} устарела ({pages} стр.), страницы сброшены",
            key=lineage.cache_key,
            pages=len(entry.pages),
        )

    async def _fetch_once(self, lineage: QueryKey, page_number: int) -> PageRecord:
        """Не больше одного запроса на (линия, страница); остальные ждут его результат."""

        slot = (lineage.cache_key, page_number)
        task = self._inflight.get(slot)
        if task is None:
            task = asyncio.create_task(
                self._fetch_page(lineage, page_number),
                name=f"page-fetch:{lineage.cache_key}:{page_number}",
            )
            self._inflight[slot] = task
            task.add_done_callback(lambda done, slot=slot: self._forget(slot, done))
        else:
            logger.debug(
                "Страница {page} для {key} уже загружается, ждём тот же запрос",
                page=page_number,
                key=lineage.cache_key,
            )
        return await asyncio.shield(task)

    def _forget(self, slot: InflightSlot, task: asyncio.Task[PageRecord]) -> None:
        if self._inflight.get(slot) is task:
            del self._inflight[slot]
        if not task.cancelled():
            # ошибку забирают ожидающие; здесь только гасим "never retrieved"
            task.exception()

    async def _fetch_page(self, lineage: QueryKey, page_number: int) -> PageRecord:
        start_offset = (page_number - 1) * lineage.page_size
        logger.debug(
            "Загрузка страницы {page} ({key}, offset {offset})",
            page=page_number,
            key=lineage.cache_key,
            offset=start_offset,
        )
        try:
            payload = await self._client.list_page(lineage.page_size, start_offset)
        except FetchError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise NetworkError(
                str(exc),
                cause=exc,
                status_code=getattr(exc, "status_code", None),
            ) from exc
        page = normalize_list_page(payload, page_size=lineage.page_size, page_number=page_number)
        await self.append_page(lineage, page)
        logger.debug(
            "Страница {page}/{total} для {key}: {count} монет",
            page=page.current_page,
            total=page.total_pages,
            key=lineage.cache_key,
            count=len(page.items),
        )
        return page


__all__ = ["PaginatedCacheStore"]
