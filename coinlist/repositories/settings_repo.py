"""Работа с таблицей AppSetting."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from coinlist.models import AppSetting


async def get_setting(session: AsyncSession, key: str) -> Optional[AppSetting]:
    stmt = select(AppSetting).where(AppSetting.key == key)
    result = await session.exec(stmt)
    return result.one_or_none()


async def upsert_setting(session: AsyncSession, key: str, value: str) -> AppSetting:
    setting = await get_setting(session, key)
    if setting is None:
        setting = AppSetting(key=key, value=value)
    else:
        setting.assign(value)
    session.add(setting)
    await session.commit()
    await session.refresh(setting)
    return setting


async def delete_setting(session: AsyncSession, key: str) -> bool:
    setting = await get_setting(session, key)
    if setting is None:
        return False
    await session.delete(setting)
    await session.commit()
    return True


__all__ = ["delete_setting", "get_setting", "upsert_setting"]
