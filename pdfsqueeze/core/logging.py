import logging
from logging import Logger
from typing import Optional

from .config import Settings, get_settings

LOG_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> Logger:
    """تهيئة مسجل خدمة الضغط بالمستوى المحدد في الإعدادات (متغير البيئة LOG_LEVEL)."""
    settings = settings or get_settings()

    logger = logging.getLogger(settings.app_name)
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False

    return logger
