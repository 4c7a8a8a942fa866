"""Configuration management for the chat relay.

This module handles all configuration loading and validation using Pydantic BaseSettings.
Configuration is loaded from environment variables and .env files.
"""

from .config import (
    AgentConfig,
    ApplicationConfig,
    GitHubConfig,
    MonitoringConfig,
    RateLimitConfig,
    RedisConfig,
    ServerConfig,
    str_to_bool,
)


def load_config() -> ApplicationConfig:
    """Load and validate application configuration."""
    return ApplicationConfig()


__all__ = [
    "ApplicationConfig",
    "ServerConfig",
    "RedisConfig",
    "RateLimitConfig",
    "AgentConfig",
    "GitHubConfig",
    "MonitoringConfig",
    "load_config",
    "str_to_bool",
]
