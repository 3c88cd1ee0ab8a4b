"""Centralized logging configuration for the reqflow application.

Sets up standard Python logging with a stdout handler and an optional file
handler, driven by the `logging.*` settings.
"""

import logging
import sys
from typing import Optional, Union

from reqflow.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = None

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def level_from_name(name: Union[int, str, None], default: int = DEFAULT_LOG_LEVEL) -> int:
    """'debug' -> logging.DEBUG; ints pass through, unknown names fall back to default."""
    if isinstance(name, int) and not isinstance(name, bool):
        return name
    if not name:
        return default
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


def setup_logging(
    log_level: Union[int, str] = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = DEFAULT_LOG_FILE
) -> None:
    """Configures the root logger for the application.

    Args:
        log_level: Level number or name ('debug', 'WARNING', ...).
        log_format: The format string for log messages.
        log_file: Optional path to a file for logging output.
    """
    level = level_from_name(log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}", exc_info=True)

    # Per-request transport chatter only shows when debugging
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else max(level, logging.WARNING))

    logging.info(f"Logging configured. Level={logging.getLevelName(level)}")


def setup_logging_from_settings(default_level: Union[int, str] = logging.WARNING) -> None:
    """Applies logging.level, logging.format and logging.file from the settings layer."""
    setup_logging(
        log_level=level_from_name(get_config('logging.level'), default=level_from_name(default_level)),
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )
