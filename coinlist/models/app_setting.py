"""Межсессионные настройки клиента (ключ -> строка)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AppSetting(SQLModel, table=True):
    """Одна строка на ключ: тема оформления, язык и т.п."""

    __tablename__ = "app_settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(max_length=128, unique=True, index=True)
    value: str = Field(default="")
    updated_at: datetime = Field(default_factory=_now, nullable=False)

    def assign(self, value: str) -> None:
        self.value = value
        self.updated_at = _now()


__all__ = ["AppSetting"]
