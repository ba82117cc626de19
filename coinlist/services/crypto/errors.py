"""Таксономия ошибок загрузки данных о криптовалютах."""

from __future__ import annotations


class FetchError(RuntimeError):
    """Базовое исключение слоя загрузки: причина + необязательный HTTP статус."""

    default_status: int | None = None

    def __init__(
        self,
        message: str = "",
        *,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.status_code = status_code if status_code is not None else self.default_status


class NetworkError(FetchError):
    """Удалённый вызов не удался (HTTP ошибка, обрыв соединения, таймаут)."""


class NotFoundError(FetchError):
    """Источник вернул пустой ответ для запрошенного id."""

    default_status = 404


class MappingError(FetchError):
    """Структура ответа не совпадает с ожидаемой схемой."""


__all__ = ["FetchError", "MappingError", "NetworkError", "NotFoundError"]
