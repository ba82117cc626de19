import pytest

from coinlist.context import build_context
from config.settings import AppSettings, DatabaseSettings


@pytest.mark.asyncio
async def test_build_context_wires_shared_stores(tmp_path):
    settings = AppSettings(
        _env_file=None,
        database=DatabaseSettings(dsn=f"sqlite+aiosqlite:///{tmp_path / 'ctx.db'}"),
    )

    context = await build_context(settings)
    try:
        feed = context.controller.infinite(settings.query.default_page_size)
        assert feed.key.page_size == 20
        assert context.page_store.stale_time == settings.query.stale_time_sec
        assert await context.theme.get_theme() == "light"
    finally:
        await context.close()
