"""Logging configuration for the ledger engine."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(default: int = logging.INFO) -> int:
    """
    Read the log level from LEDGER_ENGINE_LOG_LEVEL.

    Args:
        default: Level used when the variable is unset or unknown

    Returns:
        Logging level constant

    Example:
        >>> os.environ["LEDGER_ENGINE_LOG_LEVEL"] = "debug"
        >>> resolve_log_level()
        10
    """
    name = os.getenv("LEDGER_ENGINE_LOG_LEVEL", "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def setup_logging(level: int | None = None, log_file: str | None = None) -> None:
    """
    Configure console logging and optional file rotation.

    Args:
        level: Logging level (default: LEDGER_ENGINE_LOG_LEVEL or INFO)
        log_file: Path to log file (default: LEDGER_ENGINE_LOG_FILE).
                 File logging is disabled when neither is set.

    Example:
        >>> from src.lib.logging_config import setup_logging
        >>> setup_logging(logging.DEBUG)
        >>> setup_logging(logging.INFO, log_file="/tmp/ledger-engine.log")
    """
    if level is None:
        level = resolve_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Configure handlers if not already configured
    if not root_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file is None:
            log_file = os.getenv("LEDGER_ENGINE_LOG_FILE")

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            # Rotating file handler: 10MB per file, keep 5 backup files
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
    else:
        for handler in root_logger.handlers:
            handler.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance

    Example:
        >>> from src.lib.logging_config import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Replayed %d trades", 12)
    """
    return logging.getLogger(name)
