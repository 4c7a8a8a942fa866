"""Utility modules for the chat relay."""

from .errors import (
    AgentRateLimitedError,
    AgentUnauthorizedError,
    AgentUnavailableError,
    AppError,
    QuotaExceededError,
    RepositoryHostingError,
    StoreUnavailableError,
    UpstreamAgentError,
    ValidationAppError,
)
from .logging import (
    clear_client_ip,
    clear_correlation_id,
    configure_logging,
    create_contextual_logger,
    get_correlation_id,
    get_logger,
    log_exception,
    set_client_ip,
    set_correlation_id,
)
from .client_ip import UNKNOWN_IP, get_client_ip

__all__ = [
    "AppError",
    "ValidationAppError",
    "QuotaExceededError",
    "StoreUnavailableError",
    "UpstreamAgentError",
    "AgentRateLimitedError",
    "AgentUnavailableError",
    "AgentUnauthorizedError",
    "RepositoryHostingError",
    "configure_logging",
    "create_contextual_logger",
    "get_logger",
    "log_exception",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "set_client_ip",
    "clear_client_ip",
    "get_client_ip",
    "UNKNOWN_IP",
]
