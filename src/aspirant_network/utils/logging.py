"""
Logging configuration for the Aspirant Network client.

Both the CLI and the Streamlit app call ``setup_logging`` once at start-up.
Bearer tokens and JWT secrets are masked before any sink sees a message, so
session tokens never end up in the rotating log file.
"""

import re
import sys
from typing import Any, Dict, Optional

from loguru import logger

from ..config import get_settings

MASK = "***"

_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.=]+"),
    re.compile(r"(JWT_SECRET=)\S+"),
    re.compile(r"(\"?token\"?\s*[:=]\s*\"?)[A-Za-z0-9\-_.]{16,}"),
)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]}:{function}:{line} - {message}"


def redact(message: str) -> str:
    """Mask bearer tokens, JWT secrets and token fields in ``message``."""
    for pattern in _SECRET_PATTERNS:
        message = pattern.sub(lambda m: m.group(1) + MASK, message)
    return message


def _patch_record(record: Dict[str, Any]) -> None:
    record["message"] = redact(record["message"])
    record["extra"].setdefault("component", record["name"] or "aspirant_network")


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Replace loguru's default sink with the client's console and file sinks.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    settings = get_settings()
    level = (log_level or settings.log_level).upper()
    as_json = settings.log_format == "json"

    logger.remove()
    logger.configure(patcher=_patch_record)

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=not as_json,
        serialize=as_json,
        backtrace=settings.debug_mode,
        diagnose=settings.debug_mode
    )

    if not settings.debug_mode:
        logger.add(
            str(settings.log_file),
            format=FILE_FORMAT,
            level=level,
            rotation="1 day",
            retention="30 days",
            compression="gz",
            backtrace=False,
            diagnose=False
        )

    logger.debug(f"Logging to stderr at {level}" + ("" if settings.debug_mode else f" and {settings.log_file}"))


def get_logger(component: str):
    """Logger tagged with the component name shown in each line."""
    return logger.bind(component=component)
