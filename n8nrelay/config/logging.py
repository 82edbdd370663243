"""
Logging configuration and setup.

The relay logs under the `n8nrelay` logger tree. discord.py is started with
`log_handler=None`, so its loggers, and httpx's, are attached to the same
handlers here, each at its own level.
"""

import logging
import sys
from pathlib import Path

from n8nrelay.config.settings import Settings

ROOT_LOGGER_NAME = "n8nrelay"

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers routed through our handlers, with their floor level.
# httpx logs every request at INFO, including webhook URLs; keep it quiet.
LIBRARY_LOG_LEVELS = {
    "discord": logging.INFO,
    "discord.gateway": logging.WARNING,
    "discord.http": logging.WARNING,
    "httpx": logging.WARNING,
}


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # Color a copy; the file handler formats the same record
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _build_handlers(settings: Settings) -> list[logging.Handler]:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    handlers: list[logging.Handler] = [console_handler]

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(file_handler)

    return handlers


def _attach(logger: logging.Logger, handlers: list[logging.Handler], level: int) -> None:
    logger.handlers.clear()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def setup_logging(settings: Settings) -> None:
    """
    Configure the relay's loggers and the discord.py / httpx loggers.

    Library loggers never log below the relay's own level, so
    LOG_LEVEL=DEBUG is needed to see discord.py gateway traffic.

    Args:
        settings: Application settings containing log configuration
    """
    level = getattr(logging, settings.log_level)
    handlers = _build_handlers(settings)

    _attach(logging.getLogger(ROOT_LOGGER_NAME), handlers, level)
    for name, floor in LIBRARY_LOG_LEVELS.items():
        library_logger = logging.getLogger(name)
        if name.count("."):
            # Child loggers propagate to the parent's handlers
            library_logger.setLevel(max(level, floor))
        else:
            _attach(library_logger, handlers, max(level, floor))

    logger = get_logger(__name__)
    logger.info(f"Logging initialized - Level: {settings.log_level}")
    if settings.log_file:
        logger.info(f"Logging to file: {settings.log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger parented under the n8nrelay root logger
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
