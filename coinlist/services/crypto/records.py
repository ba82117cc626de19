"""Доменные записи: ключи запросов, монеты, страницы и записи кеша."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class ResourceKind(str, Enum):
    """Тип ресурса, для которого строится ключ кеша."""

    CRYPTOS = "cryptos"
    CRYPTO_BY_ID = "crypto_by_id"


class FilterKind(str, Enum):
    """Клиентский фильтр по изменению цены за 24 часа."""

    ALL = "all"
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(slots=True, frozen=True)
class QueryKey:
    """Идентичность одной независимо кешируемой и пагинируемой выборки."""

    resource_kind: ResourceKind = ResourceKind.CRYPTOS
    page_size: int = 20
    filter_kind: FilterKind = FilterKind.ALL
    item_id: str | None = None

    def __post_init__(self) -> None:
        if self.resource_kind is ResourceKind.CRYPTOS and self.page_size <= 0:
            raise ValueError(f"page_size должен быть > 0, получено {self.page_size}")

    @classmethod
    def for_list(cls, page_size: int, filter_kind: FilterKind | str = FilterKind.ALL) -> "QueryKey":
        return cls(ResourceKind.CRYPTOS, page_size, FilterKind(filter_kind))

    @classmethod
    def for_item(cls, item_id: str) -> "QueryKey":
        return cls(ResourceKind.CRYPTO_BY_ID, 0, FilterKind.ALL, item_id)

    def lineage(self) -> "QueryKey":
        """Ключ, под которым хранятся страницы: фильтр на сервер не уходит."""

        if self.filter_kind is FilterKind.ALL:
            return self
        return replace(self, filter_kind=FilterKind.ALL)

    def with_filter(self, filter_kind: FilterKind | str) -> "QueryKey":
        return replace(self, filter_kind=FilterKind(filter_kind))

    def with_page_size(self, page_size: int) -> "QueryKey":
        return replace(self, page_size=page_size)

    @property
    def cache_key(self) -> str:
        """Стабильная строка для бэкенда aiocache."""

        if self.resource_kind is ResourceKind.CRYPTO_BY_ID:
            return f"{self.resource_kind.value}:{self.item_id}"
        return f"{self.resource_kind.value}:infinite:{self.page_size}:{self.filter_kind.value}"


@dataclass(slots=True, frozen=True)
class CryptoItem:
    """Монета в списке. Цены и проценты: десятичные строки как у источника."""

    id: str
    name: str
    symbol: str
    price_usd: str
    percent_change_24h: str


@dataclass(slots=True, frozen=True)
class CryptoDetail:
    """Карточка монеты (надмножество полей CryptoItem)."""

    id: str
    symbol: str
    name: str
    rank: int
    price_usd: str
    percent_change_24h: str
    percent_change_1h: str
    percent_change_7d: str
    price_btc: str
    market_cap_usd: str
    volume24: float
    volume24a: float


@dataclass(slots=True, frozen=True)
class PageRecord:
    """Одна страница от сервера плюс метаданные пагинации."""

    items: tuple[CryptoItem, ...]
    current_page: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """Запись стора страниц. Не мутируется: при добавлении страницы заменяется целиком."""

    key: QueryKey
    pages: tuple[PageRecord, ...] = ()
    fetched_at: float = 0.0

    def page(self, page_number: int) -> PageRecord | None:
        for page in self.pages:
            if page.current_page == page_number:
                return page
        return None

    def is_stale(self, now: float, stale_time: float) -> bool:
        return now - self.fetched_at >= stale_time

    def with_page(self, page: PageRecord) -> "CacheEntry":
        """Новая запись со страницей `page` (повторный номер заменяется)."""

        pages = [existing for existing in self.pages if existing.current_page != page.current_page]
        pages.append(page)
        pages.sort(key=lambda record: record.current_page)
        return replace(self, pages=tuple(pages))


@dataclass(slots=True, frozen=True)
class CachedDetail:
    """Запись стора карточек."""

    detail: CryptoDetail
    fetched_at: float = field(default=0.0)

    def is_stale(self, now: float, stale_time: float) -> bool:
        return now - self.fetched_at >= stale_time


__all__ = [
    "CacheEntry",
    "CachedDetail",
    "CryptoDetail",
    "CryptoItem",
    "FilterKind",
    "PageRecord",
    "QueryKey",
    "ResourceKind",
]
