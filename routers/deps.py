"""Dependencies resolving services from application state."""

from fastapi import Request

from config import ApplicationConfig
from services import AgentClient, CounterStore, RateLimiter, SessionCoordinator


def get_config(request: Request) -> ApplicationConfig:
    return request.app.state.config  # type: ignore[no-any-return]


def get_store(request: Request) -> CounterStore:
    return request.app.state.store  # type: ignore[no-any-return]


def get_agent_client(request: Request) -> AgentClient:
    return request.app.state.agent_client  # type: ignore[no-any-return]


def get_rate_limiter(request: Request) -> RateLimiter:
    """Dependency to get the quota gate from application state."""
    return request.app.state.rate_limiter  # type: ignore[no-any-return]


def get_session_coordinator(request: Request) -> SessionCoordinator:
    return request.app.state.session_coordinator  # type: ignore[no-any-return]
