"""Стор страниц: кеш по линии, дедупликация запросов, устаревание."""

import asyncio

import pytest

from coinlist.services.crypto import (
    FilterKind,
    MappingError,
    NetworkError,
    PageRecord,
    PaginatedCacheStore,
    QueryKey,
)
from tests.fakes import STALE_TIME, FakeCryptoClient, make_ticker, settle


@pytest.mark.asyncio
@pytest.mark.parametrize(("page_size", "page_number"), [(2, 1), (2, 2), (5, 2), (1, 7), (3, 4)])
async def test_page_number_is_echoed_back(page_store, fake_client, page_size, page_number):
    page = await page_store.get_or_fetch(QueryKey.for_list(page_size), page_number)

    assert page.current_page == page_number
    assert page.total_pages == -(-len(fake_client.tickers) // page_size)
    assert fake_client.list_calls == [(page_size, (page_number - 1) * page_size)]


@pytest.mark.asyncio
async def test_second_read_is_served_from_cache(page_store, fake_client):
    key = QueryKey.for_list(3)

    first = await page_store.get_or_fetch(key, 1)
    second = await page_store.get_or_fetch(key, 1)

    assert first == second
    assert len(fake_client.list_calls) == 1


@pytest.mark.asyncio
async def test_concurrent_requests_share_one_call(page_store, fake_client):
    key = QueryKey.for_list(4)
    fake_client.gate = asyncio.Event()

    first = asyncio.create_task(page_store.get_or_fetch(key, 1))
    second = asyncio.create_task(page_store.get_or_fetch(key, 1))
    await settle()
    assert page_store.in_flight(key, 1)
    assert page_store.in_flight(key)
    assert not page_store.in_flight(key, 2)

    fake_client.gate.set()
    pages = await asyncio.gather(first, second)

    assert pages[0] == pages[1]
    assert fake_client.list_calls == [(4, 0)]
    assert not page_store.in_flight(key)


@pytest.mark.asyncio
async def test_concurrent_failure_reaches_every_waiter(page_store, fake_client):
    key = QueryKey.for_list(4)
    fake_client.gate = asyncio.Event()
    fake_client.list_failures.append(NetworkError("boom", status_code=502))

    waiters = [asyncio.create_task(page_store.get_or_fetch(key, 1)) for _ in range(3)]
    await settle()
    fake_client.gate.set()
    results = await asyncio.gather(*waiters, return_exceptions=True)

    assert all(isinstance(result, NetworkError) for result in results)
    assert len(fake_client.list_calls) == 1


@pytest.mark.asyncio
async def test_failure_is_not_cached(page_store, fake_client):
    key = QueryKey.for_list(5)
    fake_client.list_failures.append(NetworkError("Request failed with status code 500", status_code=500))

    with pytest.raises(NetworkError) as excinfo:
        await page_store.get_or_fetch(key, 1)
    assert excinfo.value.status_code == 500
    assert await page_store.peek(key) is None

    page = await page_store.get_or_fetch(key, 1)
    assert len(page.items) == 5
    assert len(fake_client.list_calls) == 2


@pytest.mark.asyncio
async def test_unexpected_client_exception_is_wrapped(page_store, fake_client):
    boom = ConnectionResetError("reset by peer")
    fake_client.list_failures.append(boom)

    with pytest.raises(NetworkError) as excinfo:
        await page_store.get_or_fetch(QueryKey.for_list(5), 1)

    assert excinfo.value.cause is boom
    assert excinfo.value.status_code is None
    assert "reset by peer" in str(excinfo.value)


@pytest.mark.asyncio
async def test_malformed_payload_raises_mapping_error(memory_cache, clock):
    class BrokenClient(FakeCryptoClient):
        async def list_page(self, page_size, start_offset):
            self.list_calls.append((page_size, start_offset))
            return {"data": "nope"}

    client = BrokenClient()
    store = PaginatedCacheStore(client, memory_cache, stale_time=STALE_TIME, clock=clock)

    with pytest.raises(MappingError):
        await store.get_or_fetch(QueryKey.for_list(2), 1)
    assert await store.peek(QueryKey.for_list(2)) is None


@pytest.mark.asyncio
async def test_filter_variants_share_cached_pages(page_store, fake_client):
    await page_store.get_or_fetch(QueryKey.for_list(3), 1)

    negative = await page_store.get_or_fetch(QueryKey.for_list(3, FilterKind.NEGATIVE), 1)
    positive = await page_store.get_or_fetch(QueryKey.for_list(3, "positive"), 1)

    assert negative == positive
    assert len(negative.items) == 3
    assert len(fake_client.list_calls) == 1


@pytest.mark.asyncio
async def test_page_sizes_are_isolated(page_store, fake_client):
    await page_store.get_or_fetch(QueryKey.for_list(2), 1)
    await page_store.get_or_fetch(QueryKey.for_list(3), 1)

    assert fake_client.list_calls == [(2, 0), (3, 0)]
    small = await page_store.peek(QueryKey.for_list(2))
    large = await page_store.peek(QueryKey.for_list(3))
    assert [len(page.items) for page in small.pages] == [2]
    assert [len(page.items) for page in large.pages] == [3]


@pytest.mark.asyncio
async def test_pages_are_kept_in_order(page_store):
    key = QueryKey.for_list(2)
    await page_store.get_or_fetch(key, 1)
    await page_store.get_or_fetch(key, 3)
    await page_store.get_or_fetch(key, 2)

    entry = await page_store.peek(key)

    assert [page.current_page for page in entry.pages] == [1, 2, 3]


@pytest.mark.asyncio
async def test_stale_lineage_is_discarded_as_a_whole(page_store, fake_client, clock):
    key = QueryKey.for_list(2)
    await page_store.get_or_fetch(key, 1)
    clock.advance(10)
    await page_store.get_or_fetch(key, 2)

    clock.advance(STALE_TIME - 10)
    assert await page_store.peek(key) is None

    await page_store.get_or_fetch(key, 2)
    await page_store.get_or_fetch(key, 1)

    assert fake_client.list_calls == [(2, 0), (2, 2), (2, 2), (2, 0)]
    entry = await page_store.peek(key)
    assert entry.fetched_at == clock.now


@pytest.mark.asyncio
async def test_entry_just_before_stale_time_is_fresh(page_store, fake_client, clock):
    key = QueryKey.for_list(2)
    await page_store.get_or_fetch(key, 1)
    clock.advance(STALE_TIME - 0.5)

    await page_store.get_or_fetch(key, 1)

    assert len(fake_client.list_calls) == 1


@pytest.mark.asyncio
async def test_append_page_replaces_same_page_number(page_store):
    key = QueryKey.for_list(2)
    first = PageRecord(items=(), current_page=1, total_pages=3)
    again = PageRecord(items=(), current_page=1, total_pages=4)

    await page_store.append_page(key, first)
    entry = await page_store.append_page(key, again)

    assert entry.pages == (again,)


@pytest.mark.asyncio
async def test_concurrent_appends_do_not_lose_pages(page_store):
    key = QueryKey.for_list(2)
    pages = [PageRecord(items=(), current_page=n, total_pages=5) for n in range(1, 6)]

    await asyncio.gather(*(page_store.append_page(key, page) for page in pages))

    entry = await page_store.peek(key)
    assert [page.current_page for page in entry.pages] == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_invalidate_and_clear(page_store, fake_client):
    await page_store.get_or_fetch(QueryKey.for_list(2), 1)
    await page_store.get_or_fetch(QueryKey.for_list(3), 1)

    await page_store.invalidate(QueryKey.for_list(2, FilterKind.POSITIVE))
    assert await page_store.peek(QueryKey.for_list(2)) is None
    assert await page_store.peek(QueryKey.for_list(3)) is not None

    await page_store.clear()
    assert await page_store.peek(QueryKey.for_list(3)) is None


@pytest.mark.asyncio
async def test_page_number_must_be_positive(page_store):
    with pytest.raises(ValueError):
        await page_store.get_or_fetch(QueryKey.for_list(2), 0)


@pytest.mark.asyncio
async def test_empty_source_reports_zero_pages(memory_cache, clock):
    client = FakeCryptoClient(tickers=[])
    store = PaginatedCacheStore(client, memory_cache, stale_time=STALE_TIME, clock=clock)

    page = await store.get_or_fetch(QueryKey.for_list(5), 1)

    assert page.items == ()
    assert page.total_pages == 0
    assert not page.has_next


@pytest.mark.asyncio
async def test_page_beyond_total_is_rejected(memory_cache, clock):
    client = FakeCryptoClient(tickers=[make_ticker(i) for i in range(3)])
    store = PaginatedCacheStore(client, memory_cache, stale_time=STALE_TIME, clock=clock)

    with pytest.raises(MappingError):
        await store.get_or_fetch(QueryKey.for_list(2), 3)


@pytest.mark.asyncio
async def test_only_first_page_starts_a_lineage(page_store, fake_client):
    key = QueryKey.for_list(2)

    page = await page_store.get_or_fetch(key, 2)

    assert page.current_page == 2
    assert await page_store.peek(key) is None
    assert await page_store.append_page(key, page) is None


@pytest.mark.asyncio
async def test_page_arriving_after_lineage_went_stale_is_not_stored(page_store, clock):
    key = QueryKey.for_list(2)
    await page_store.get_or_fetch(key, 1)
    clock.advance(STALE_TIME)

    stored = await page_store.append_page(key, PageRecord(items=(), current_page=2, total_pages=5))

    assert stored is None
    assert await page_store.peek(key) is None


@pytest.mark.asyncio
async def test_expired_backend_entry_is_no_longer_tracked(page_store, memory_cache):
    key = QueryKey.for_list(2)
    await page_store.get_or_fetch(key, 1)
    assert key.cache_key in page_store.tracked_keys

    # так выглядит истечение TTL в бэкенде
    await memory_cache.delete(key.cache_key)

    assert await page_store.peek(key) is None
    assert page_store.tracked_keys == frozenset()
