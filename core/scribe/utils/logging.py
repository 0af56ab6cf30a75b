"""Logging for Scribe Core.

Every module logs through the single ``scribe`` logger. Its records go to
stdout only and do not reach the root logger, so a root handler installed
by uvicorn or ``logging.basicConfig`` does not print them a second time.
"""

import logging
import sys
from typing import Union

from scribe.config import LOG_FORMAT, LOG_LEVEL

LOGGER_NAME = "scribe"


def setup_logging(level: Union[int, str] = LOG_LEVEL) -> logging.Logger:
    """Configure the ``scribe`` logger; safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    handler = next(
        (h for h in logger.handlers if getattr(h, "_scribe_handler", False)), None
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler._scribe_handler = True
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    handler.setLevel(level)

    return logger


logger = setup_logging()
