"""Глобальные настройки coinlist.

Настройки разделены по доменам (внешний API, кеш, пагинация, БД, локализация),
чтобы ядро загрузки/кеширования можно было подключать к любому клиенту без
переписывания базового кода. Вся конфигурация загружается из переменных окружения
через Pydantic Settings, вложенные секции задаются через `__`
(например, QUERY__STALE_TIME_SEC=600).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    PositiveFloat,
    PositiveInt,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
ACCESSIBLE_ENV_FILE = BASE_DIR / "config" / "runtime.env"
DEFAULT_ENV_FILE = BASE_DIR / ".env"
ENV_FILE = ACCESSIBLE_ENV_FILE if ACCESSIBLE_ENV_FILE.exists() else DEFAULT_ENV_FILE


class ApiSettings(BaseModel):
    """Публичный REST API котировок (coinlore совместимый)."""

    base_url: AnyHttpUrl = Field(
        "https://api.coinlore.net",
        description="Базовый URL, к нему добавляются /api/tickers/ и /api/ticker/",
    )
    request_timeout: PositiveFloat = Field(
        10.0, description="Общий таймаут HTTP запроса, секунды"
    )


class CacheSettings(BaseModel):
    """Настройки aiocache (процессный кеш в памяти)."""

    backend: Literal["memory"] = "memory"
    ttl_seconds: int = Field(
        3600, description="TTL записи в бэкенде, после него память освобождается"
    )


class QuerySettings(BaseModel):
    """Параметры пагинации и устаревания данных."""

    default_page_size: PositiveInt = 20
    stale_time_sec: PositiveFloat = Field(
        3600.0, description="Через сколько секунд страницы списка считаются устаревшими"
    )
    detail_stale_time_sec: PositiveFloat = Field(
        3600.0, description="Через сколько секунд карточка монеты считается устаревшей"
    )


class DatabaseSettings(BaseModel):
    """SQLModel + aiosqlite для межсессионных настроек (тема и т.п.)."""

    dsn: str = Field(
        "sqlite+aiosqlite:///./database/coinlist.db",
        description="Строка подключения SQLAlchemy/SQLModel",
    )
    echo: bool = False


class LocalizationSettings(BaseModel):
    """Список доступных языков и язык по умолчанию."""

    default_locale: str = "es"
    enabled_locales: list[str] = Field(default_factory=lambda: ["es", "en"])
    locales_path: Path = BASE_DIR / "locales"

    @field_validator("enabled_locales", mode="before")
    @classmethod
    def _split_csv(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


class AppSettings(BaseSettings):
    """Главный контейнер настроек coinlist."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False
    api: ApiSettings = ApiSettings()
    cache: CacheSettings = CacheSettings()
    query: QuerySettings = QuerySettings()
    database: DatabaseSettings = DatabaseSettings()
    localization: LocalizationSettings = LocalizationSettings()

    @property
    def is_production(self) -> bool:
        """True, если ядро запущено в продовой среде."""

        return self.environment == "prod"


# Ленивый синглтон (избегаем глобальных переменных в модулях).
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Возвращает единый экземпляр настроек.

    Значения кэшируются, поэтому .env читается ровно один раз за процесс.
    """

    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reset_settings() -> None:
    """Сбрасывает синглтон (используется в тестах после подмены окружения)."""

    global _settings
    _settings = None


__all__ = [
    "ApiSettings",
    "AppSettings",
    "CacheSettings",
    "DatabaseSettings",
    "LocalizationSettings",
    "QuerySettings",
    "get_settings",
    "reset_settings",
]
