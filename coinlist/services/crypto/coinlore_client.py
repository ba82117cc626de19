"""HTTP-клиент публичного API тикеров (coinlore совместимый).

Клиент ничего не кеширует и не нормализует: он отдаёт сырые JSON-структуры или
поднимает NetworkError/MappingError. Кеширование и валидация живут выше.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Protocol

import aiohttp
from loguru import logger

from config.settings import ApiSettings, get_settings
from .errors import MappingError, NetworkError


class RemoteFetchClient(Protocol):
    """Граница удалённого источника, которую используют сторы."""

    async def list_page(self, page_size: int, start_offset: int) -> Any:
        """Сырой ответ со страницей тикеров, начиная с `start_offset`."""
        ...

    async def get_by_id(self, item_id: str) -> Any:
        """Сырой ответ (список тикеров) для одной монеты."""
        ...


class CoinloreClient:
    """Лёгкий aiohttp-клиент поверх /api/tickers/ и /api/ticker/."""

    def __init__(
        self,
        settings: ApiSettings | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        settings = settings or get_settings().api
        self._base_url = str(settings.base_url).rstrip("/")
        self._timeout = settings.request_timeout
        self._session = session
        self._owns_session = session is None

    async def start(self) -> None:
        """Инициализирует HTTP session (повторный вызов безопасен)."""

        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"Accept": "application/json"},
            )
            self._owns_session = True
            logger.info("CoinloreClient готов: {url}", url=self._base_url)

    async def close(self) -> None:
        """Закрывает собственную HTTP-сессию."""

        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def list_page(self, page_size: int, start_offset: int) -> Any:
        return await self._get_json(
            "/api/tickers/",
            {"start": str(start_offset), "limit": str(page_size)},
        )

    async def get_by_id(self, item_id: str) -> Any:
        return await self._get_json("/api/ticker/", {"id": item_id})

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        await self.start()
        assert self._session is not None
        url = f"{self._base_url}{path}"
        try:
            async with self._session.get(url, params=params) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    logger.debug(
                        "GET {url} {params} -> HTTP {status}: {body}",
                        url=url,
                        params=params,
                        status=resp.status,
                        body=text[:200],
                    )
                    raise NetworkError(
                        f"Request failed with status code {resp.status}",
                        status_code=resp.status,
                    )
                raw = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("GET {url} упал: {error!r}", url=url, error=exc)
            raise NetworkError(str(exc) or type(exc).__name__, cause=exc) from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MappingError(f"Ответ {path} не является JSON", cause=exc) from exc


__all__ = ["CoinloreClient", "RemoteFetchClient"]
