"""Data models for the chat relay.

This module contains all Pydantic models used throughout the application,
ensuring strict type safety and runtime validation."""

# Import chat models
from .chat import ChatAIMetadata, ChatRequest, ChatResponse, ChatTurnResult

# Import agent models
from .agent import AgentMetadata, AgentReply

# Import quota models
from .quota import QuotaDecision

# Import repository hosting models
from .github import (
    CreateFileRequest,
    CreateRepoRequest,
    EnablePagesRequest,
    FileContent,
    FileResponse,
    PagesSite,
    ReadFileRequest,
    Repository,
)

# Import probe models
from .health import HealthStatus, ServiceInfo

__all__ = [
    # Chat models
    "ChatRequest",
    "ChatResponse",
    "ChatTurnResult",
    "ChatAIMetadata",
    # Agent models
    "AgentReply",
    "AgentMetadata",
    # Quota models
    "QuotaDecision",
    # Repository hosting models
    "Repository",
    "PagesSite",
    "FileContent",
    "FileResponse",
    "CreateRepoRequest",
    "CreateFileRequest",
    "ReadFileRequest",
    "EnablePagesRequest",
    # Probe models
    "HealthStatus",
    "ServiceInfo",
]
