"""Test utilities and fixtures for the chat relay tests."""

import os
import sys
from typing import AsyncGenerator, Dict, Optional
from unittest.mock import AsyncMock

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from main import create_app, install_services
from models import AgentMetadata, AgentReply
from services import InMemoryCounterStore, RateLimiter


class FakeClock:
    """Manually advanced time source for expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_config(**overrides) -> ApplicationConfig:
    """Build a config that ignores the process environment's defaults."""
    values = {
        "store_backend": "memory",
        "rate_limit_per_day": 20,
        "agent_provider": "http",
        "ai_server_url": "http://agent.test",
        "ai_api_key": "test-agent-key",
        "ai_timeout_seconds": 2.0,
        "github_token": "test-github-token",
        "github_owner": "octo-test",
        "log_level": "DEBUG",
        "log_json": False,
    }
    values.update(overrides)
    return ApplicationConfig(**values)


def make_reply(
    response: str = "Hello from the agent",
    conversation_id: str = "resp_001",
    metadata: Optional[Dict] = None,
) -> AgentReply:
    meta = AgentMetadata(**metadata) if metadata is not None else None
    return AgentReply(response=response, conversation_id=conversation_id, metadata=meta)


@pytest.fixture
def mock_config() -> ApplicationConfig:
    """Create a configuration for testing."""
    return make_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock) -> InMemoryCounterStore:
    return InMemoryCounterStore(clock=clock)


@pytest.fixture
def rate_limiter(mock_config, memory_store) -> RateLimiter:
    return RateLimiter(mock_config, memory_store)


@pytest.fixture
def mock_agent_client() -> AsyncMock:
    """Create a mock agent client that answers every message."""
    mock_client = AsyncMock()
    mock_client.process_message = AsyncMock(
        return_value=make_reply(metadata={"model": "test-model", "tokens": 42, "processing_time": 12.5})
    )
    mock_client.health_check = AsyncMock(return_value=True)
    mock_client.close = AsyncMock()
    return mock_client


@pytest.fixture
def app(mock_config, memory_store, mock_agent_client) -> FastAPI:
    """Application wired to the in-memory store and the mock agent."""
    application = create_app(mock_config)
    install_services(application, mock_config, memory_store, mock_agent_client)
    return application


@pytest_asyncio.fixture(scope="function")
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for the app."""
    transport = ASGITransport(app=app, client=("203.0.113.7", 51000))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def config_factory():
    """Build configs with overrides, e.g. a lower daily limit."""
    return make_config


@pytest.fixture
def reply_factory():
    return make_reply
