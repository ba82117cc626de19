"""Единая точка настройки aiocache."""

from __future__ import annotations

from aiocache import SimpleMemoryCache, caches
from aiocache.base import BaseCache

from config.settings import get_settings

_configured = False


def configure_cache() -> None:
    """Настраивает алиас `default` как процессный кеш в памяти."""

    global _configured
    if _configured:
        return

    settings = get_settings()
    caches.set_config(
        {
            "default": {
                "cache": SimpleMemoryCache,
                "ttl": settings.cache.ttl_seconds,
            }
        }
    )
    _configured = True


def get_cache(alias: str = "default") -> BaseCache:
    """Возвращает кеш по алиасу (предварительно гарантирует конфиг)."""

    configure_cache()
    return caches.get(alias)


def remaining_ttl(stale_time: float, age: float) -> int:
    """Сколько секунд бэкенду держать запись, которой уже `age` секунд.

    Запись в aiocache переживает устаревание минимум на секунду: свежесть
    проверяет сам стор, TTL бэкенда только освобождает память.
    """

    return max(int(stale_time - age), 0) + 1


__all__ = ["configure_cache", "get_cache", "remaining_ttl"]
