"""Logging setup for DocFlow.

``configure_logging`` is called once at start-up with the application
``Settings``. It attaches handlers to the ``docflow`` package logger, and
every module logs through ``logging.getLogger(__name__)`` so records
propagate up to it. SQL statement logging (``database_echo``) goes through
the same handlers instead of SQLAlchemy's own stream handler.
"""

import logging
import logging.handlers
import os
from typing import List

from docflow.core.config import Settings

PACKAGE_LOGGER = "docflow"
SQL_LOGGER = "sqlalchemy.engine"

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"  # ISO 8601

# Marks handlers installed here so reconfiguring replaces only those
_INSTALLED = "_docflow_handler"


def _parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(
            f"Invalid log level: {level}. "
            f"Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )
    return value


def _build_handlers(settings: Settings) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if settings.file_logging:
        os.makedirs(settings.log_dir, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            os.path.join(settings.log_dir, f"{PACKAGE_LOGGER}.log"),
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _INSTALLED, True)
    return handlers


def _replace_handlers(logger: logging.Logger, handlers: List[logging.Handler]) -> None:
    for handler in [h for h in logger.handlers if getattr(h, _INSTALLED, False)]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configure the package logger from settings.

    Args:
        settings: Application settings; uses ``log_level``, ``file_logging``,
            ``log_dir``, ``log_max_bytes``, ``log_backup_count`` and
            ``database_echo``

    Returns:
        The ``docflow`` logger

    Raises:
        ValueError: If ``log_level`` is not a logging level name
    """
    level = _parse_level(settings.log_level)
    handlers = _build_handlers(settings)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    _replace_handlers(logger, handlers)

    sql_logger = logging.getLogger(SQL_LOGGER)
    if settings.database_echo:
        sql_logger.setLevel(logging.INFO)
        _replace_handlers(sql_logger, handlers)
    else:
        sql_logger.setLevel(logging.WARNING)
        _replace_handlers(sql_logger, [])

    return logger
