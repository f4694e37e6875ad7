import logging
import sys

from microhabit.core.config import settings


def _configure_logger() -> logging.Logger:
    logger = logging.getLogger("microhabit.api")
    if not logger.handlers:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        logger.setLevel(level if isinstance(level, int) else logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


logger = _configure_logger()
