# authdb/core/log.py
"""Logging setup driven by Settings.LOG_LEVEL and Settings.LOG_FORMAT."""
import logging
from typing import Optional

from authdb.core.config import Settings, get_settings


def configure_logging(config: Optional[Settings] = None) -> None:
    """Apply the configured level and format to the root logger."""
    config = config or get_settings()
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format=config.LOG_FORMAT,
    )
    logging.getLogger("authdb").setLevel(config.LOG_LEVEL)
