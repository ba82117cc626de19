"""Pydantic-схемы сырых ответов API тикеров.

Числа, пришедшие там, где источник обычно отдаёт строки, приводятся к строкам;
неизвестные поля игнорируются.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, frozen=True)


class RawTickerSummary(_RawModel):
    """Минимум полей тикера, нужный для строки списка."""

    id: str
    symbol: str
    name: str
    price_usd: str
    percent_change_24h: str


class RawTicker(RawTickerSummary):
    """Полный тикер из /api/ticker/?id=."""

    nameid: str | None = None
    rank: int
    percent_change_1h: str
    percent_change_7d: str
    price_btc: str
    market_cap_usd: str
    volume24: float
    volume24a: float
    csupply: str | None = None
    tsupply: str | None = None
    msupply: str | None = None


class RawListInfo(_RawModel):
    coins_num: int = Field(ge=0)
    time: int | None = None


class RawListPage(_RawModel):
    """Ответ /api/tickers/?start=&limit=."""

    data: list[RawTickerSummary]
    info: RawListInfo


__all__ = ["RawListInfo", "RawListPage", "RawTicker", "RawTickerSummary"]
