"""Контроллер бесконечного списка поверх PaginatedCacheStore.

Состояния: IDLE -> LOADING_FIRST -> READY(has_more) -> LOADING_MORE -> READY.
Пагинация строго последовательная: страница N+1 запрашивается только после того,
как результат страницы N (успех или ошибка) обработан. Смена размера страницы
переключает ключ; поздние ответы старого ключа отбрасываются.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable

from loguru import logger

from config.settings import get_settings
from .errors import FetchError
from .filters import flatten, project
from .page_store import PaginatedCacheStore
from .records import CryptoItem, FilterKind, PageRecord, QueryKey


class CollectionStatus(str, Enum):
    IDLE = "idle"
    LOADING_FIRST = "loading_first"
    READY = "ready"
    LOADING_MORE = "loading_more"


@dataclass(slots=True, frozen=True)
class CollectionState:
    """Снимок состояния для подписчиков (UI, тесты).

    merged_pages хранит страницы после удаления повторов: монета, уже показанная
    на предыдущей странице, из следующей выбрасывается. Поэтому длина items
    равна сумме элементов merged_pages, но может быть меньше суммы страниц,
    отданных сервером (их без изменений хранит PaginatedCacheStore).
    """

    key: QueryKey
    status: CollectionStatus = CollectionStatus.IDLE
    merged_pages: tuple[PageRecord, ...] = ()
    pages: tuple[PageRecord, ...] = ()
    has_more: bool = True
    error: FetchError | None = None

    @property
    def items(self) -> list[CryptoItem]:
        """Видимые (отфильтрованные) монеты в порядке страниц."""

        return flatten(self.pages)

    @property
    def is_loading(self) -> bool:
        return self.status is CollectionStatus.LOADING_FIRST

    @property
    def is_fetching_more(self) -> bool:
        return self.status is CollectionStatus.LOADING_MORE

    @property
    def current_page(self) -> int:
        return self.merged_pages[-1].current_page if self.merged_pages else 0

    @property
    def total_pages(self) -> int:
        return self.merged_pages[-1].total_pages if self.merged_pages else 0


StateCallback = Callable[[CollectionState], Awaitable[None]]

_LOADING = (CollectionStatus.LOADING_FIRST, CollectionStatus.LOADING_MORE)


class InfiniteCollectionController:
    """Склеивает страницы одного QueryKey и отдаёт отфильтрованное представление."""

    def __init__(self, store: PaginatedCacheStore, key: QueryKey | None = None) -> None:
        self._store = store
        self._key = key or QueryKey.for_list(get_settings().query.default_page_size)
        self._generation = 0
        self._loading_generation: int | None = None
        self._subscribers: list[StateCallback] = []
        self._state = CollectionState(key=self._key)

    @property
    def key(self) -> QueryKey:
        return self._key

    @property
    def state(self) -> CollectionState:
        return self._state

    @property
    def has_next_page(self) -> bool:
        return self._state.has_more

    def subscribe(self, callback: StateCallback) -> None:
        """Добавляет подписчика на переходы состояния."""

        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: StateCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    async def fetch_next(self) -> CollectionState:
        """Загружает следующую страницу; no-op во время загрузки и при has_more=False."""

        if self._loading_generation == self._generation or self._state.status in _LOADING:
            logger.trace("fetch_next пропущен: загрузка {key} уже идёт", key=self._key.cache_key)
            return self._state
        generation = self._generation
        key = self._key
        self._loading_generation = generation
        try:
            merged = self._state.merged_pages
            if merged and await self._store.peek(key) is None:
                logger.info(
                    "Линия {key} устарела, перезагрузка с первой страницы",
                    key=key.cache_key,
                )
                merged = ()
            if self._abandoned(generation):
                return self._state
            if merged and not self._state.has_more:
                return self._state

            page = None
            while page is None:
                page_number = merged[-1].current_page + 1 if merged else 1
                await self._emit(
                    CollectionState(
                        key=self._key,
                        status=CollectionStatus.LOADING_MORE if merged else CollectionStatus.LOADING_FIRST,
                        merged_pages=merged,
                        pages=project(merged, self._key.filter_kind),
                        has_more=self._state.has_more if merged else True,
                    )
                )
                try:
                    page = await self._store.get_or_fetch(key, page_number)
                except FetchError as exc:
                    if self._abandoned(generation):
                        logger.debug("Ошибка по брошенному ключу {key} проигнорирована", key=key.cache_key)
                        return self._state
                    logger.warning(
                        "Страница {page} для {key} не загрузилась: {error!r}",
                        page=page_number,
                        key=key.cache_key,
                        error=exc,
                    )
                    await self._emit(
                        replace(
                            self._state,
                            status=CollectionStatus.READY if merged else CollectionStatus.IDLE,
                            error=exc,
                        )
                    )
                    return self._state

                if self._abandoned(generation):
                    logger.debug(
                        "Страница {page} для брошенного ключа {key} не склеивается",
                        page=page_number,
                        key=key.cache_key,
                    )
                    return self._state
                entry = await self._store.peek(key) if merged else None
                if merged and (entry is None or entry.page(page_number) != page):
                    # линия устарела, пока страница грузилась: свежую страницу
                    # нельзя клеить к устаревшим, начинаем с первой
                    logger.info(
                        "Линия {key} устарела во время загрузки страницы {page}",
                        key=key.cache_key,
                        page=page_number,
                    )
                    merged = ()
                    page = None
                    if self._abandoned(generation):
                        return self._state
            merged = merged + (self._dedupe(merged, page),)
            await self._emit(
                CollectionState(
                    key=self._key,
                    status=CollectionStatus.READY,
                    merged_pages=merged,
                    pages=project(merged, self._key.filter_kind),
                    has_more=page.has_next,
                )
            )
            return self._state
        finally:
            if self._loading_generation == generation:
                self._loading_generation = None

    async def set_filter(self, filter_kind: FilterKind | str) -> CollectionState:
        """Меняет клиентский фильтр: только пересчёт представления, без сети."""

        kind = FilterKind(filter_kind)
        if kind is self._key.filter_kind:
            return self._state
        self._key = self._key.with_filter(kind)
        await self._emit(
            replace(
                self._state,
                key=self._key,
                pages=project(self._state.merged_pages, kind),
            )
        )
        return self._state

    async def set_page_size(self, page_size: int) -> CollectionState:
        """Переключает линию пагинации; незавершённые ответы старой линии отбрасываются."""

        if page_size == self._key.page_size:
            return self._state
        self._key = self._key.with_page_size(page_size)
        self._generation += 1
        self._state = CollectionState(key=self._key)
        logger.debug("Переключение на {key}", key=self._key.cache_key)
        return await self.hydrate()

    async def hydrate(self) -> CollectionState:
        """Подхватывает из кеша уже загруженные подряд страницы текущей линии."""

        generation = self._generation
        if self._state.merged_pages or self._loading_generation == generation:
            return self._state
        entry = await self._store.peek(self._key)
        merged: list[PageRecord] = []
        if entry is not None:
            for page in entry.pages:
                if page.current_page != len(merged) + 1:
                    break
                merged.append(self._dedupe(tuple(merged), page))
        if (
            self._abandoned(generation)
            or self._loading_generation == generation
            or self._state.merged_pages
        ):
            return self._state
        if merged:
            await self._emit(
                CollectionState(
                    key=self._key,
                    status=CollectionStatus.READY,
                    merged_pages=tuple(merged),
                    pages=project(merged, self._key.filter_kind),
                    has_more=merged[-1].has_next,
                )
            )
        else:
            await self._emit(self._state)
        return self._state

    async def refresh(self) -> CollectionState:
        """Сбрасывает линию в кеше и загружает первую страницу заново."""

        await self._store.invalidate(self._key)
        self._generation += 1
        await self._emit(CollectionState(key=self._key))
        return await self.fetch_next()

    def _abandoned(self, generation: int) -> bool:
        return generation != self._generation

    @staticmethod
    def _dedupe(merged: tuple[PageRecord, ...], page: PageRecord) -> PageRecord:
        """Убирает монеты, уже показанные на предыдущих страницах (сдвиг рейтинга)."""

        seen = {item.id for previous in merged for item in previous.items}
        if not seen.intersection(item.id for item in page.items):
            return page
        unique = tuple(item for item in page.items if item.id not in seen)
        logger.debug(
            "Страница {page}: отброшено {count} повторов",
            page=page.current_page,
            count=len(page.items) - len(unique),
        )
        return replace(page, items=unique)

    async def _emit(self, state: CollectionState) -> None:
        self._state = state
        if not self._subscribers:
            return
        await asyncio.gather(*(self._safe_emit(cb, state) for cb in tuple(self._subscribers)))

    async def _safe_emit(self, callback: StateCallback, state: CollectionState) -> None:
        try:
            await callback(state)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Подписчик коллекции упал: {error}", error=exc)


__all__ = [
    "CollectionState",
    "CollectionStatus",
    "InfiniteCollectionController",
    "StateCallback",
]
