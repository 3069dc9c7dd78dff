import logging
import sys

from logging.handlers import RotatingFileHandler
from pathlib import Path

from sketchtunes.config import get_settings

LOG_FILE_NAME = "sketchtunes.log"

# Chatty third-party loggers, capped at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "urllib3", "supabase", "postgrest", "storage3")


class LogColors:
    RESET = "\033[0m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    GRAY = "\033[90m"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output"""

    COLORS = {
        logging.DEBUG: LogColors.GRAY,
        logging.INFO: LogColors.BLUE,
        logging.WARNING: LogColors.YELLOW,
        logging.ERROR: LogColors.RED,
        logging.CRITICAL: LogColors.MAGENTA,
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = self.COLORS.get(record.levelno)
        if color:
            record.levelname = f"{color}{levelname}{LogColors.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = levelname


def setup_logging(level: str | None = None) -> None:
    """
    Configure logging for the whole server.

    Call once at startup, before the FastAPI app is created.

    Args:
        level: Overrides ``settings.log_level`` when given
    """
    settings = get_settings()
    level = level or settings.log_level

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if settings.is_development:
        formatter = ColoredFormatter(
            fmt="%(levelname)s:\t%(asctime)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    else:
        formatter = logging.Formatter(
            fmt="%(levelname)s:%(asctime)s:%(name)s:%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.is_production:
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)

        # 10MB per file, 5 backups
        file_handler = RotatingFileHandler(
            filename=log_dir / LOG_FILE_NAME,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Let uvicorn propagate to the root handlers
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers.clear()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module or component.

    Usage:
        from sketchtunes.core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
