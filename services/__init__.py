"""Service layer for the chat relay."""

from .agent_client import AgentClient, HttpAgentClient
from .agent_factory import create_agent_client
from .coding_agent import OpenAICodingAgent
from .counter_store import CounterStore
from .github_client import GitHubClient
from .github_tools import GitHubToolbox
from .memory_store import InMemoryCounterStore
from .rate_limiter import RateLimiter
from .redis_store import RedisCounterStore
from .session_coordinator import SessionCoordinator

__all__ = [
    "AgentClient",
    "HttpAgentClient",
    "OpenAICodingAgent",
    "create_agent_client",
    "CounterStore",
    "RedisCounterStore",
    "InMemoryCounterStore",
    "RateLimiter",
    "SessionCoordinator",
    "GitHubClient",
    "GitHubToolbox",
]
