"""Каталог локализованных текстов для уведомлений об ошибках загрузки.

Каждый язык лежит в locales/<lang>.json. Если ключа нет в выбранном языке,
берётся язык по умолчанию, если нет и там, возвращается сам ключ.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from config.settings import LocalizationSettings, get_settings


class _KeepMissing(dict):
    """Неизвестный плейсхолдер остаётся в тексте как есть."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class MessageCatalog:
    def __init__(self, settings: LocalizationSettings | None = None) -> None:
        settings = settings or get_settings().localization
        self.default_locale = settings.default_locale
        self._enabled = tuple(dict.fromkeys(settings.enabled_locales))
        self._path = settings.locales_path
        self._messages: dict[str, dict[str, str]] = {}
        self.reload()

    @property
    def enabled_locales(self) -> tuple[str, ...]:
        return tuple(sorted(self._enabled))

    def reload(self) -> None:
        """Перечитывает все включённые языки с диска."""

        loaded: dict[str, dict[str, str]] = {}
        for locale in self._enabled:
            path = self._path / f"{locale}.json"
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                logger.warning("Нет файла локали {path}", path=path)
                continue
            except json.JSONDecodeError as exc:
                logger.error("Локаль {locale} повреждена: {error}", locale=locale, error=exc)
                continue
            if not isinstance(raw, dict):
                logger.error("Локаль {locale}: ожидался JSON-объект", locale=locale)
                continue
            loaded[locale] = {str(key): str(text) for key, text in raw.items()}
        self._messages = loaded
        logger.debug("Каталог текстов: {locales}", locales=", ".join(loaded) or "пусто")

    def resolve_locale(self, hint: str | None) -> str:
        """`es-AR` -> `es`; неизвестный или пустой язык -> язык по умолчанию."""

        if hint:
            base = hint.lower().split("-")[0]
            if base in self._enabled:
                return base
        return self.default_locale

    def gettext(self, key: str, locale: str | None = None, **kwargs: Any) -> str:
        for candidate in (self.resolve_locale(locale), self.default_locale):
            template = self._messages.get(candidate, {}).get(key)
            if template is not None:
                break
        else:
            logger.debug("Текст {key} не найден ни в одной локали", key=key)
            template = key
        return template.format_map(_KeepMissing(kwargs)) if kwargs else template

    def alert(self, topic: str, locale: str | None = None, **kwargs: Any) -> tuple[str, str]:
        """Заголовок и тело уведомления `error_<topic>_title` / `error_<topic>_body`."""

        return (
            self.gettext(f"error_{topic}_title", locale),
            self.gettext(f"error_{topic}_body", locale, **kwargs),
        )


__all__ = ["MessageCatalog"]
