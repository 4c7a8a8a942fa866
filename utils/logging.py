"""Logging utilities for the chat relay.

This module provides structured logging with support for both JSON and console output,
request correlation through context variables, and redaction of secret-bearing fields.
"""

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

import structlog

# Context variables for per-request correlation
correlation_id_context: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
client_ip_context: ContextVar[Optional[str]] = ContextVar("client_ip", default=None)

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset({
    "authorization",
    "api_key",
    "ai_api_key",
    "openai_api_key",
    "github_token",
    "password",
    "redis_password",
    "secret",
})


def _log4j_formatter(logger: Any, name: str, event_dict: Dict[str, Any]) -> str:
    """Format logs in log4j style: timestamp [level]: message {json_context}"""
    timestamp = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", "info")
    event = event_dict.pop("event", "")
    event_dict.pop("logger", None)

    if event_dict:
        context_json = json.dumps(event_dict, sort_keys=True, separators=(",", ":"), default=str)
        return f"{timestamp} [{level}]: {event} {context_json}"
    return f"{timestamp} [{level}]: {event}"


def _add_request_context(logger: Any, name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add process info plus the correlation ID and client IP of the current request."""
    event_dict["pid"] = os.getpid()
    event_dict["hostname"] = os.uname().nodename

    correlation_id = correlation_id_context.get()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)

    client_ip = client_ip_context.get()
    if client_ip:
        event_dict.setdefault("client_ip", client_ip)

    return event_dict


def _redact_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in SENSITIVE_KEYS else _redact_value(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact_value(v) for v in value)
    return value


def _redact_sensitive(logger: Any, name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Replace secret-bearing fields with a placeholder before rendering."""
    return _redact_value(event_dict)


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Set correlation ID for the current context.

    Args:
        correlation_id: The correlation ID to set. If None, generates a new UUID.

    Returns:
        The correlation ID that was set.
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    correlation_id_context.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID."""
    return correlation_id_context.get()


def clear_correlation_id() -> None:
    """Clear the current correlation ID."""
    correlation_id_context.set(None)


def set_client_ip(client_ip: Optional[str]) -> None:
    """Attach the caller's IP to logs emitted in the current context."""
    client_ip_context.set(client_ip)


def clear_client_ip() -> None:
    client_ip_context.set(None)


def configure_logging(log_level: str = "INFO", json_output: bool = True, include_system_context: bool = True) -> None:
    """Configure structured logging.

    Args:
        log_level: The minimum log level to output (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output pure JSON format. If False, use log4j-style format.
        include_system_context: If True, include PID, hostname and request context.
    """
    logging.getLogger().handlers.clear()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    # Suppress noisy third-party library logs
    for noisy in ("httpx", "httpcore", "urllib3", "requests", "openai", "asyncio", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if include_system_context:
        processors.append(_add_request_context)

    processors.append(_redact_sensitive)
    processors.append(structlog.processors.UnicodeDecoder())

    if json_output:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True, default=str))
    else:
        processors.append(_log4j_formatter)

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """Get a configured logger with optional initial context.

    Args:
        name: The logger name (typically __name__ or module path)
        **initial_context: Initial context to bind to the logger

    Returns:
        A bound logger instance with the given name and context
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def create_contextual_logger(name: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Create a logger bound to a service name and other static context.

    The correlation ID is read from the context variable at emit time.
    """
    return get_logger(name, **context)


def log_exception(
    logger: structlog.stdlib.BoundLogger,
    exception: Exception,
    message: str = "An error occurred",
    **additional_context: Any
) -> None:
    """Log an exception with full context and stack trace.

    Args:
        logger: The logger to use
        exception: The exception that occurred
        message: A descriptive message about the error
        **additional_context: Additional context to include in the log
    """
    context = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        **additional_context
    }

    logger.error(message, exc_info=True, **context)
