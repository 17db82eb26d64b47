"""
Logging setup for multijack processes.
"""

import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """
    Attach a console handler to the ``multijack`` logger.

    The level comes from the argument, then MULTIJACK_LOG_LEVEL, then INFO.
    Calling this more than once does not add duplicate handlers.
    """
    logger = logging.getLogger("multijack")
    level = level or os.environ.get("MULTIJACK_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
