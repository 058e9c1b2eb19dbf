from __future__ import annotations

import logging
import os

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger with a sensible default configuration.

    The root level honours ``MOLTOPO_LOG_LEVEL`` (e.g. ``DEBUG``) the first
    time logging is configured.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        level_name = os.environ.get("MOLTOPO_LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format=_DEFAULT_FORMAT,
        )
    return logger
