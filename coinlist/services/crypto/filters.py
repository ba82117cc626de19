"""Клиентский фильтр по изменению цены за 24 часа.

Фильтр меняет только представление, пагинацию он не трогает: у страниц остаются исходные
current_page/total_pages, поэтому "есть ещё" считается по нефильтрованному
серверному итогу, даже если видимых строк на странице не осталось.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Iterable

from .records import CryptoItem, FilterKind, PageRecord

_LEADING_NUMBER = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_change(value: str | None) -> float | None:
    """Читает число в начале строки, хвост игнорируется: `"1.5%"` даёт 1.5.

    `"1_000"` даёт 1.0, `"inf"`, `"nan"` и строки без числа в начале дают None;
    из бесконечностей принимается только `Infinity`.
    """

    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER.match(value.lstrip())
    if match is None:
        return None
    return float(match.group())


def matches(item: CryptoItem, filter_kind: FilterKind) -> bool:
    if filter_kind is FilterKind.ALL:
        return True
    change = parse_change(item.percent_change_24h)
    if change is None:
        return False
    if filter_kind is FilterKind.POSITIVE:
        return change >= 0
    return change < 0


def project(
    pages: Iterable[PageRecord],
    filter_kind: FilterKind | str = FilterKind.ALL,
) -> tuple[PageRecord, ...]:
    """Проекция склеенных страниц через фильтр без мутации исходных записей."""

    kind = FilterKind(filter_kind)
    pages = tuple(pages)
    if kind is FilterKind.ALL:
        return pages
    return tuple(
        replace(page, items=tuple(item for item in page.items if matches(item, kind)))
        for page in pages
    )


def flatten(pages: Iterable[PageRecord]) -> list[CryptoItem]:
    """Плоский список монет в порядке страниц."""

    return [item for page in pages for item in page.items]


__all__ = ["flatten", "matches", "parse_change", "project"]
