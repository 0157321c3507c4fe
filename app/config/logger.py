"""
Logger configuration for the Device Console API using Loguru.

Console output is colored. File sinks live under ``settings.LOGS_DIR``:

- app.log       everything at DEBUG and above
- errors.log    ERROR and above
- requests.log  lines written by the HTTP middleware ("REQUEST ...")
- audit.log     device and admin-user mutations ("AUDIT ...")
"""

import sys
from pathlib import Path
from typing import Callable, Optional

from fastapi import Request
from loguru import logger

from app.config.settings import settings

DETAILED_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
MESSAGE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


def _message_tag(tag: str) -> Callable[[dict], bool]:
    return lambda record: record["message"].startswith(tag)


# file name, level, format, rotation, retention, filter
FILE_SINKS = [
    ("app.log", "DEBUG", DETAILED_FORMAT, "10 MB", "7 days", None),
    ("errors.log", "ERROR", DETAILED_FORMAT, "5 MB", "30 days", None),
    ("requests.log", "INFO", MESSAGE_FORMAT, "20 MB", "14 days", _message_tag("REQUEST")),
    ("audit.log", "INFO", MESSAGE_FORMAT, "10 MB", "90 days", _message_tag("AUDIT")),
]


class LoguruConfig:
    """Loguru configuration class for the application."""

    def __init__(self, logs_dir: str = "logs"):
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def setup_logger(self, log_level: str = "INFO") -> None:
        logger.remove()

        logger.add(
            sys.stdout,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=log_level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

        for filename, level, fmt, rotation, retention, record_filter in FILE_SINKS:
            logger.add(
                self.logs_dir / filename,
                format=fmt,
                level=level,
                rotation=rotation,
                retention=retention,
                compression="zip",
                encoding="utf-8",
                backtrace=level != "INFO",
                diagnose=False,
                filter=record_filter,
            )


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def log_request_start(request: Request) -> None:
    logger.bind(client_ip=_client_ip(request), query=str(request.query_params)).info(
        f"REQUEST START: {request.method} {request.url.path}"
    )


def log_request_end(request: Request, status_code: int, process_time: float) -> None:
    """Log the completion of a request, at WARNING for 4xx/5xx answers."""
    level = "WARNING" if status_code >= 400 else "INFO"
    logger.bind(client_ip=_client_ip(request)).log(
        level,
        f"REQUEST END: {request.method} {request.url.path} - {status_code} ({process_time:.4f}s)",
    )


def log_request_error(request: Request, error: Exception, process_time: float) -> None:
    logger.bind(client_ip=_client_ip(request), error_type=type(error).__name__).error(
        f"REQUEST ERROR: {request.method} {request.url.path} - {error} ({process_time:.4f}s)"
    )


loguru_config = LoguruConfig(logs_dir=settings.LOGS_DIR)
loguru_config.setup_logger(settings.LOG_LEVEL)

app_logger = logger
