import logging
import os
from typing import Optional

import structlog
from pythonjsonlogger.json import JsonFormatter


def configure_logging(level: Optional[str] = None, log_path: Optional[str] = None):
    # stdlib root logger emits JSON to stdout and, optionally, a file
    logger = logging.getLogger()
    logger.setLevel((level or os.environ.get("JOURNAL_LOG_LEVEL", "INFO")).upper())
    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    log_path = log_path or os.environ.get("JOURNAL_LOG_FILE")
    handlers = [stream_handler]
    if log_path:
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logger.handlers = handlers
    logger.propagate = False

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    return structlog.get_logger(name)
