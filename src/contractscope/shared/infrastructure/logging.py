"""
Structured logging configuration using structlog.

Provides consistent, structured logging across all modules.
File paths and tokens that end up in log events are redacted.
"""

import logging
import re
import sys
from typing import Any

import structlog

from contractscope.shared.infrastructure.config import settings

_REDACTIONS = {
    r"(?i)\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b": "[EMAIL_REDACTED]",
    r"/Users/[^/\s]+": "[HOME_REDACTED]",
    r"/home/[^/\s]+": "[HOME_REDACTED]",
    r"(?i)(api[_-]?key|token|password|secret)['\"]?\s*[:=]\s*['\"]?([^'\"\s]+)": r"\1=[REDACTED]",
    r"(?i)Bearer\s+\S+": "Bearer [TOKEN_REDACTED]",
}


def _redact_string(text: str) -> str:
    for pattern, replacement in _REDACTIONS.items():
        text = re.sub(pattern, replacement, text)
    return text


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return _redact_string(value)
    if isinstance(value, dict):
        return {k: _redact_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact_value(v) for v in value]
    return value


def privacy_redactor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Redact sensitive information from log events.

    Source paths from analysed repositories routinely contain home
    directories, and URLs seen at call sites can carry credentials.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Redacted event dictionary
    """
    if not settings.log_redaction_enabled:
        return event_dict
    return {k: _redact_value(v) for k, v in event_dict.items()}


def configure_logging(stream: Any = sys.stderr) -> None:
    """
    Configure structlog for the application.

    Sets up:
    - Pretty console output for development
    - JSON output for production
    - Log level from settings
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        privacy_redactor,
    ]

    if settings.is_development:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=stream.isatty() if hasattr(stream, "isatty") else False),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper()),
        force=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("contract_created", method="GET", endpoint="/api/users")
    """
    return structlog.get_logger(name)
