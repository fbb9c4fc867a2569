from __future__ import annotations

import logging
from typing import Optional, Union

from .settings import get_settings, parse_log_level

LOGGER_NAME = "task_store"


# PUBLIC_INTERFACE
def setup_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Configure console logging for the task_store logger.

    The level defaults to LOG_LEVEL from settings. Calling this more than once
    only updates the level; a single console handler is kept. The root logger
    is left alone.
    """
    if level is None:
        level = get_settings().log_level
    elif isinstance(level, str):
        # Unknown names fall back to INFO, same as LOG_LEVEL
        level = parse_log_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(getattr(h, "_task_store_console", False) for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        console_handler._task_store_console = True  # type: ignore[attr-defined]
        logger.addHandler(console_handler)

    logger.debug("Logging configured: Level=%s", logging.getLevelName(logger.level))
    return logger
