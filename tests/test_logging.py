import logging
import sys

from loguru import logger

from coinlist.logging_config import setup_logging


def test_stdlib_records_reach_loguru():
    setup_logging(level="DEBUG")
    captured = []
    sink_id = logger.add(captured.append, format="{message}", level="DEBUG")
    try:
        logging.getLogger("aiohttp.client").warning("connection reset")
    finally:
        logger.remove(sink_id)
        logger.remove()
        logger.add(sys.stderr)

    assert any("connection reset" in str(message) for message in captured)
