"""Загрузка, кеширование и пагинация списка криптовалют."""

from .coinlore_client import CoinloreClient, RemoteFetchClient
from .collection import CollectionState, CollectionStatus, InfiniteCollectionController
from .controller import ApiResponse, CryptoController, make_response, response_from_error
from .errors import FetchError, MappingError, NetworkError, NotFoundError
from .filters import matches, parse_change, project
from .item_store import ItemCacheStore
from .normalizer import normalize_detail, normalize_list_page
from .page_store import PaginatedCacheStore
from .records import (
    CacheEntry,
    CryptoDetail,
    CryptoItem,
    FilterKind,
    PageRecord,
    QueryKey,
    ResourceKind,
)

__all__ = [
    "ApiResponse",
    "CacheEntry",
    "CoinloreClient",
    "CollectionState",
    "CollectionStatus",
    "CryptoController",
    "CryptoDetail",
    "CryptoItem",
    "FetchError",
    "FilterKind",
    "InfiniteCollectionController",
    "ItemCacheStore",
    "MappingError",
    "NetworkError",
    "NotFoundError",
    "PageRecord",
    "PaginatedCacheStore",
    "QueryKey",
    "RemoteFetchClient",
    "ResourceKind",
    "make_response",
    "matches",
    "normalize_detail",
    "normalize_list_page",
    "parse_change",
    "project",
    "response_from_error",
]
