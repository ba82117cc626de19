"""Настройка loguru и перехват стандартного logging (aiohttp, sqlalchemy, aiocache)."""

from __future__ import annotations

import logging
import sys

from loguru import logger

_PLAIN_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
)
_LIBRARY_LOGGERS = ("aiohttp", "aiocache", "sqlalchemy.engine", "asyncio")


class InterceptHandler(logging.Handler):
    """Переправляет записи стандартного logging в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(json: bool = False, level: str = "INFO") -> None:
    """Один sink в stdout: текстовый или JSON (serialize) для сборщика логов."""

    logger.remove()
    logger.add(
        sys.stdout,
        level=level.upper(),
        format=_PLAIN_FORMAT,
        serialize=json,
        colorize=not json,
        backtrace=False,
        enqueue=True,
    )
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True


__all__ = ["InterceptHandler", "setup_logging"]
