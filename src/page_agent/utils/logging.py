"""
Logging setup for Page Agent.

Every module logs through a child of the ``page_agent`` logger. The
handlers (stderr and an optional rotating file) hang off that logger
and are installed once per process by setup_logging().
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from page_agent.config.settings import LoggingSettings


ROOT_LOGGER_NAME = "page_agent"

_configured = False


def setup_logging(
    settings: "LoggingSettings | None" = None,
    level: str | None = None,
) -> logging.Logger:
    """
    Install the application's log handlers.

    Console output goes to stderr so that ``page-agent analyze --json``
    keeps stdout machine-readable. Calling again only adjusts the level.

    Args:
        settings: Logging section of the configuration; defaults when None
        level: Level name overriding settings.level (the CLI's --verbose)

    Returns:
        The ``page_agent`` logger
    """
    global _configured

    if settings is None:
        from page_agent.config.settings import LoggingSettings

        settings = LoggingSettings()

    root = logging.getLogger(ROOT_LOGGER_NAME)
    numeric_level = getattr(logging, (level or settings.level).upper())

    if not _configured:
        root.handlers.clear()
        for handler in _build_handlers(settings):
            root.addHandler(handler)
        # Records stop here so embedding servers do not print them twice
        root.propagate = False
        _configured = True

    root.setLevel(numeric_level)
    for handler in root.handlers:
        handler.setLevel(numeric_level)

    return root


def _build_handlers(settings: "LoggingSettings") -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=settings.format, datefmt=settings.date_format)
    handlers: list[logging.Handler] = []

    if settings.log_to_console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if settings.file_path is not None:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=str(settings.file_path),
            maxBytes=settings.max_file_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return a logger under the ``page_agent`` hierarchy.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Analysis started")
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Close and detach the installed handlers so setup_logging() starts fresh."""
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    _configured = False
