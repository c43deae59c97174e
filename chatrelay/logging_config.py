"""
Structured logging configuration.

This module provides:
- JSON-formatted log output in production for log aggregators
- Redaction of upstream credentials (Together, OpenRouter, Tavily, Perplexity)
- Colored human-readable output in development
- Noise reduction from chatty libraries

Usage:
    from chatrelay.logging_config import setup_logging
    setup_logging()  # Call once at application startup
"""

import logging
import sys
import os
import json
import re
from datetime import datetime, timezone
from typing import Any, Dict


# ==============================================================================
# Sensitive Data Patterns for Redaction
# ==============================================================================

SENSITIVE_PATTERNS = [
    # Authorization headers echoed into error bodies
    (re.compile(r"(bearer\s+)[\w.-]{16,}", re.IGNORECASE), r"\1[REDACTED]"),
    # Provider key formats
    (re.compile(r"(sk-or-(?:v1-)?)[a-zA-Z0-9]{16,}"), r"\1[REDACTED]"),
    (re.compile(r"(tvly-(?:dev-)?)[a-zA-Z0-9]{16,}"), r"\1[REDACTED]"),
    (re.compile(r"(pplx-)[a-zA-Z0-9]{16,}"), r"\1[REDACTED]"),
    # "api_key": "..." in logged request bodies (Tavily sends the key in JSON)
    (
        re.compile(r'(["\']?api[_-]?key["\']?\s*[=:]\s*)["\']?[\w-]{16,}["\']?', re.IGNORECASE),
        r"\1[REDACTED]",
    ),
    (
        re.compile(r'(x-api-key["\']?\s*[=:]\s*)["\']?[^\s"\',]+["\']?', re.IGNORECASE),
        r"\1[REDACTED]",
    ),
]


def redact_sensitive_data(message: str) -> str:
    """
    Redact credentials from log messages.

    Args:
        message: The log message to redact

    Returns:
        Message with secrets replaced by [REDACTED]
    """
    if not isinstance(message, str):
        message = str(message)

    for pattern, replacement in SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


# ==============================================================================
# Formatters
# ==============================================================================

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, source
    location, exception text and any ``extra`` fields, all redacted."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_sensitive_data(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = redact_sensitive_data(
                self.formatException(record.exc_info)
            )

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            log_data[key] = redact_sensitive_data(value) if isinstance(value, str) else value

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable colored formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        formatted = redact_sensitive_data(super().format(record))
        if not color:
            return formatted
        return f"{color}{formatted}{self.RESET}"


# ==============================================================================
# Setup Function
# ==============================================================================

NOISY_LOGGERS = (
    "uvicorn.access",
    "uvicorn.error",
    "aiohttp.access",
    "aiohttp.client",
    "httpx",
    "httpcore",
)


def setup_logging() -> None:
    """
    Configure application logging based on environment.

    - Production (ENV=production): JSON format to stdout
    - Development: Colored human-readable format
    - Level from LOG_LEVEL (default: INFO)
    """
    env = os.getenv("ENV", "development")
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        log_level = "INFO"

    # Clear any existing handlers (important for testing)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    if env == "production":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ColoredFormatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(console_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={log_level}, format={'JSON' if env == 'production' else 'colored'}"
    )
