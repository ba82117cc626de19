"""Потребительский API ядра: ответы {data, error, status_code} без исключений."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from loguru import logger

from coinlist.utils.i18n import MessageCatalog
from .collection import InfiniteCollectionController
from .item_store import ItemCacheStore
from .page_store import PaginatedCacheStore
from .records import CryptoDetail, FilterKind, PageRecord, QueryKey

T = TypeVar("T")

UNKNOWN_ERROR = "Unknown error"

Notifier = Callable[[str, str], Awaitable[None]]


@dataclass(slots=True, frozen=True)
class ApiResponse(Generic[T]):
    """Трёхзначный результат: данные или ошибка плюс HTTP-подобный статус."""

    data: T | None
    error: str | None
    status_code: int

    @property
    def ok(self) -> bool:
        return self.error is None


def make_response(data: T | None, error: str | None, status_code: int) -> ApiResponse[T]:
    return ApiResponse(data=data, error=error, status_code=status_code)


def response_from_error(exc: Exception) -> ApiResponse[T]:
    """Ошибка без сообщения превращается в "Unknown error", без статуса в 500."""

    message = str(exc) or UNKNOWN_ERROR
    status_code = getattr(exc, "status_code", None) or 500
    return make_response(None, message, status_code)


class CryptoController:
    """Точка входа для слоя представления: список, карточка и бесконечная лента."""

    def __init__(
        self,
        page_store: PaginatedCacheStore,
        item_store: ItemCacheStore,
        *,
        messages: MessageCatalog | None = None,
        notifier: Notifier | None = None,
        locale: str | None = None,
    ) -> None:
        self._page_store = page_store
        self._item_store = item_store
        self._messages = messages
        self._notifier = notifier
        self._locale = locale

    async def get_page(self, page_size: int, page_number: int) -> ApiResponse[PageRecord]:
        """Страница списка; ошибки возвращаются в поле error."""

        try:
            page = await self._page_store.get_or_fetch(QueryKey.for_list(page_size), page_number)
        except Exception as exc:  # noqa: BLE001
            response: ApiResponse[PageRecord] = response_from_error(exc)
            logger.warning(
                "get_page({size}, {page}) -> {status}: {error}",
                size=page_size,
                page=page_number,
                status=response.status_code,
                error=response.error,
            )
            await self._notify(
                "cryptos",
                error=response.error,
                status=response.status_code,
            )
            return response
        return make_response(page, None, 200)

    async def get_by_id(self, item_id: str) -> ApiResponse[CryptoDetail]:
        """Карточка монеты; при ошибке data=None."""

        try:
            detail = await self._item_store.get_or_fetch(item_id)
        except Exception as exc:  # noqa: BLE001
            response: ApiResponse[CryptoDetail] = response_from_error(exc)
            logger.warning(
                "get_by_id({item_id}) -> {status}: {error}",
                item_id=item_id,
                status=response.status_code,
                error=response.error,
            )
            await self._notify(
                "crypto",
                error=response.error,
                status=response.status_code,
            )
            return response
        return make_response(detail, None, 200)

    def infinite(
        self,
        page_size: int,
        filter_kind: FilterKind | str = FilterKind.ALL,
    ) -> InfiniteCollectionController:
        """Новый контроллер ленты поверх общего стора страниц."""

        return InfiniteCollectionController(
            self._page_store,
            QueryKey.for_list(page_size, filter_kind),
        )

    async def _notify(self, topic: str, **kwargs: object) -> None:
        if self._notifier is None or self._messages is None:
            return
        title, body = self._messages.alert(topic, self._locale, **kwargs)
        try:
            await self._notifier(title, body)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Уведомление об ошибке не отправлено: {error}", error=exc)


__all__ = [
    "ApiResponse",
    "CryptoController",
    "Notifier",
    "UNKNOWN_ERROR",
    "make_response",
    "response_from_error",
]
