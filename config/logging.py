"""
Logging configuration for the project
"""

# pylint: disable=line-too-long

import os
import logging
import logging.config
from pathlib import Path

from dotenv import load_dotenv

from src.utils.helpers import get_project_root, ensure_directory

load_dotenv()

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_DIR = os.getenv("LOG_DIR", "monitoring/logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class ColoredFormatter(logging.Formatter):
    """
    Formatter that adds colors to console output for better readability.
    """

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        original_levelname = record.levelname

        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"

        result = super().format(record)

        # Restore so the file handlers get the plain level name
        record.levelname = original_levelname

        return result


def _rotating_handler(filename: Path, level: str, formatter: str = "detailed") -> dict:
    """Build a RotatingFileHandler entry for the dictConfig"""

    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": filename,
        "maxBytes": int(os.getenv("LOG_MAX_SIZE", "10485760")),
        "backupCount": int(os.getenv("LOG_BACKUP_COUNT", "5")),
    }


def setup_logging():
    """Function to setup logging"""

    project_root = get_project_root()
    log_dir = project_root / Path(LOG_DIR)
    ensure_directory(log_dir)

    formatters = {
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s -"
            " %(funcName)s:%(lineno)d - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "json": {
            "format": "{"
            '"timestamp": "%(asctime)s", '
            '"logger": "%(name)s", '
            '"level": "%(levelname)s", '
            '"function": "%(funcName)s", '
            '"line": %(lineno)d, '
            '"message": "%(message)s"'
            "}",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "colored": {
            "()": "config.logging.ColoredFormatter",
            "format": "%(asctime)s - %(name)s - %(levelname)s -"
            " %(funcName)s:%(lineno)d - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    }

    handlers = {
        # Console handler for real-time output
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "colored",
            "stream": "ext://sys.stdout",
        },
        "file_info": _rotating_handler(log_dir / "app.log", LOG_LEVEL),
        "file_error": _rotating_handler(log_dir / "error.log", "ERROR"),
        # Payload loading
        "data_ingestion": _rotating_handler(log_dir / "data_ingestion.log", LOG_LEVEL),
        # Normalization and rider aggregation
        "data_processing": _rotating_handler(
            log_dir / "data_processing.log", LOG_LEVEL
        ),
    }

    loggers = {
        # Root logger
        "": {
            "handlers": ["console", "file_info", "file_error"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "data_ingestion": {
            "handlers": ["console", "data_ingestion", "file_error"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "data_processing": {
            "handlers": ["console", "data_processing", "file_error"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    }

    if ENVIRONMENT == "production":
        # Level for the JSON copies is fixed; the rest comes from .env
        handlers["data_ingestion_json"] = _rotating_handler(
            log_dir / "data_ingestion_json.log", "WARNING", formatter="json"
        )
        handlers["data_processing_json"] = _rotating_handler(
            log_dir / "data_processing_json.log", "WARNING", formatter="json"
        )
        loggers["data_ingestion"]["handlers"].append("data_ingestion_json")
        loggers["data_processing"]["handlers"].append("data_processing_json")

    elif ENVIRONMENT == "testing":
        handlers["test_handler"] = _rotating_handler(log_dir / "test.log", LOG_LEVEL)
        loggers["test"] = {
            "handlers": ["console", "test_handler", "file_error"],
            "level": "DEBUG",
            "propagate": False,
        }

    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers,
    }

    logging.config.dictConfig(log_config)

    logger = logging.getLogger("logging_config")
    logger.info("Logging configured. Log directory: %s", log_dir.absolute())
    logger.info("Environment: %s", ENVIRONMENT)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name (str): The name of the logger. If None, returns the root logger.

    Returns:
        logger (logging.Logger): The logger instance.
    """

    return logging.getLogger(name)
