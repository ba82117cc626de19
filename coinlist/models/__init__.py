"""SQLModel сущности coinlist."""

from .app_setting import AppSetting  # noqa: F401

__all__ = ["AppSetting"]
