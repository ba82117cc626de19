"""Точечный кеш карточек монет по id."""

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
from .normalizer import normalize_detail
from .records import CachedDetail, CryptoDetail, QueryKey


class ItemCacheStore:
    """Возвращает CryptoDetail из кеша либо загружает его. Без ретраев."""

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
            stale_time
            if stale_time is not None
            else get_settings().query.detail_stale_time_sec
        )
        self._clock = clock
        self._inflight: dict[str, asyncio.Task[CryptoDetail]] = {}

    async def get_or_fetch(self, item_id: str) -> CryptoDetail:
        """Карточка из свежего кеша; иначе сетевой запрос (ошибки не кешируются)."""

        if not item_id:
            raise ValueError("item_id не может быть пустым")
        key = QueryKey.for_item(item_id)
        cached: CachedDetail | None = await self._cache.get(key.cache_key)
        if cached is not None:
            if not cached.is_stale(self._clock(), self._stale_time):
                return cached.detail
            logger.debug("Карточка {item_id} устарела, перезагрузка", item_id=item_id)
        task = self._inflight.get(key.cache_key)
        if task is None:
            task = asyncio.create_task(self._fetch(key), name=f"item-fetch:{item_id}")
            self._inflight[key.cache_key] = task
            task.add_done_callback(lambda done, slot=key.cache_key: self._forget(slot, done))
        return await asyncio.shield(task)

    async def invalidate(self, item_id: str) -> None:
        await self._cache.delete(QueryKey.for_item(item_id).cache_key)

    def _forget(self, slot: str, task: asyncio.Task[CryptoDetail]) -> None:
        if self._inflight.get(slot) is task:
            del self._inflight[slot]
        if not task.cancelled():
            task.exception()

    async def _fetch(self, key: QueryKey) -> CryptoDetail:
        item_id = key.item_id or ""
        try:
            payload = await self._client.get_by_id(item_id)
        except FetchError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise NetworkError(
                str(exc),
                cause=exc,
                status_code=getattr(exc, "status_code", None),
            ) from exc
        detail = normalize_detail(payload, item_id)
        await self._cache.set(
            key.cache_key,
            CachedDetail(detail=detail, fetched_at=self._clock()),
            ttl=remaining_ttl(self._stale_time, 0),
        )
        logger.debug("Карточка {item_id} загружена и закеширована", item_id=item_id)
        return detail


__all__ = ["ItemCacheStore"]
