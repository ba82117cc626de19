"""Нормализация сырых ответов API в доменные записи.

Любое нарушение ожидаемой структуры превращается в MappingError, пустой ответ
на запрос карточки в NotFoundError. Неопределённые поля дальше не уходят.
"""

from __future__ import annotations

import math
from typing import Any

from loguru import logger
from pydantic import ValidationError

from .errors import MappingError, NotFoundError
from .records import CryptoDetail, CryptoItem, PageRecord
from .schemas import RawListPage, RawTicker


def total_pages_for(coins_num: int, page_size: int) -> int:
    """Число страниц при известном общем количестве монет."""

    return math.ceil(coins_num / (page_size or 1))


def normalize_list_page(payload: Any, *, page_size: int, page_number: int) -> PageRecord:
    """Превращает ответ /api/tickers/ в PageRecord для страницы `page_number`."""

    try:
        raw = RawListPage.model_validate(payload)
    except ValidationError as exc:
        logger.debug("Ответ списка не прошёл валидацию: {error}", error=exc)
        raise MappingError(
            f"Неожиданная структура страницы {page_number}: {exc.error_count()} ошибок",
            cause=exc,
        ) from exc

    total_pages = total_pages_for(raw.info.coins_num, page_size)
    if total_pages > 0 and page_number > total_pages:
        raise MappingError(
            f"Страница {page_number} вне диапазона: всего страниц {total_pages}",
        )
    items = tuple(
        CryptoItem(
            id=ticker.id,
            name=ticker.name,
            symbol=ticker.symbol,
            price_usd=ticker.price_usd,
            percent_change_24h=ticker.percent_change_24h,
        )
        for ticker in raw.data
    )
    return PageRecord(items=items, current_page=page_number, total_pages=total_pages)


def normalize_detail(payload: Any, item_id: str) -> CryptoDetail:
    """Превращает ответ /api/ticker/?id= (список из одного тикера) в CryptoDetail."""

    if payload is None or (isinstance(payload, list) and not payload):
        raise NotFoundError(f"Криптовалюта не найдена: {item_id}")
    if not isinstance(payload, list):
        raise MappingError(
            f"Ожидался список тикеров для {item_id}, получено {type(payload).__name__}",
        )
    try:
        raw = RawTicker.model_validate(payload[0])
    except ValidationError as exc:
        logger.debug("Тикер {item_id} не прошёл валидацию: {error}", item_id=item_id, error=exc)
        raise MappingError(
            f"Неожиданная структура тикера {item_id}: {exc.error_count()} ошибок",
            cause=exc,
        ) from exc
    return CryptoDetail(
        id=raw.id,
        symbol=raw.symbol,
        name=raw.name,
        rank=raw.rank,
        price_usd=raw.price_usd,
        percent_change_24h=raw.percent_change_24h,
        percent_change_1h=raw.percent_change_1h,
        percent_change_7d=raw.percent_change_7d,
        price_btc=raw.price_btc,
        market_cap_usd=raw.market_cap_usd,
        volume24=raw.volume24,
        volume24a=raw.volume24a,
    )


__all__ = ["normalize_detail", "normalize_list_page", "total_pages_for"]
