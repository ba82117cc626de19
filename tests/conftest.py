"""Общие фикстуры: фейковый источник тикеров, управляемые часы, кеш в памяти."""

from uuid import uuid4

import pytest
from aiocache import SimpleMemoryCache

from coinlist.services.crypto import ItemCacheStore, PaginatedCacheStore
from tests.fakes import STALE_TIME, FakeClock, FakeCryptoClient, bitcoin_ticker, make_ticker


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache() -> SimpleMemoryCache:
    return SimpleMemoryCache(namespace=f"test-{uuid4().hex}:", timeout=None)


@pytest.fixture
def fake_client() -> FakeCryptoClient:
    return FakeCryptoClient(
        tickers=[make_ticker(i) for i in range(10)],
        details={"bitcoin": [bitcoin_ticker()]},
    )


@pytest.fixture
def page_store(fake_client, memory_cache, clock) -> PaginatedCacheStore:
    return PaginatedCacheStore(fake_client, memory_cache, stale_time=STALE_TIME, clock=clock)


@pytest.fixture
def item_store(fake_client, memory_cache, clock) -> ItemCacheStore:
    return ItemCacheStore(fake_client, memory_cache, stale_time=STALE_TIME, clock=clock)
