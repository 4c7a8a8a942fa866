"""Configuration classes for the chat relay.

This module contains all configuration classes organized by domain.
Configuration is loaded from environment variables and .env files.
"""

from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def str_to_bool(value: Any) -> bool:
    """Convert various string representations to boolean values.

    Args:
        value: The value to convert. Can be bool, str, int, or any other type.

    Returns:
        bool: The converted boolean value.

    Examples:
        >>> str_to_bool("true")
        True
        >>> str_to_bool("0")
        False
        >>> str_to_bool("enabled")
        True
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on", "enabled")
    if isinstance(value, int):
        return bool(value)
    return bool(value)


class ServerConfig(BaseSettings):
    """Server configuration settings."""

    app_name: str = Field(default="Chat Relay", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = False

    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=3000, alias="PORT")
    trust_proxy: bool = Field(default=True, alias="TRUST_PROXY")
    request_id_header: str = "X-Request-ID"

    @field_validator("trust_proxy", mode="before")
    @classmethod
    def validate_trust_proxy(cls, v) -> bool:
        """Convert string boolean values to actual boolean."""
        return str_to_bool(v)


class RedisConfig(BaseSettings):
    """Counter store configuration settings."""

    store_backend: str = Field(default="redis", alias="STORE_BACKEND")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    redis_socket_timeout: int = 5
    redis_retry_on_timeout: bool = True
    redis_max_connections: int = 20

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Only the Redis and in-memory backends exist."""
        backend = v.lower()
        if backend not in ("redis", "memory"):
            raise ValueError("store_backend must be one of: ['redis', 'memory']")
        return backend


class RateLimitConfig(BaseSettings):
    """Daily quota and chat session settings."""

    rate_limit_per_day: int = Field(default=20, ge=1, alias="RATE_LIMIT_PER_DAY")
    rate_limit_window_seconds: int = 86400
    session_ttl_seconds: int = 3600


class AgentConfig(BaseSettings):
    """Conversational agent configuration settings."""

    agent_provider: str = Field(default="http", alias="AGENT_PROVIDER")
    ai_server_url: str = Field(default="http://localhost:8080", alias="AI_SERVER_URL")
    ai_api_key: str = Field(default="", alias="AI_API_KEY")
    ai_timeout_seconds: float = Field(default=30.0, gt=0, alias="AI_TIMEOUT_SECONDS")
    ai_health_timeout_seconds: float = 5.0
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    agent_max_tool_rounds: int = Field(default=8, ge=1, alias="AGENT_MAX_TOOL_ROUNDS")

    @field_validator("agent_provider")
    @classmethod
    def validate_agent_provider(cls, v: str) -> str:
        """Validate agent provider."""
        provider = v.lower()
        if provider not in ("http", "openai"):
            raise ValueError("agent_provider must be one of: ['http', 'openai']")
        return provider

    @field_validator("ai_server_url")
    @classmethod
    def validate_ai_server_url(cls, v: str) -> str:
        """Ensure the agent URL is properly formatted."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("ai_server_url must start with http:// or https://")
        return v.rstrip("/")


class GitHubConfig(BaseSettings):
    """Repository hosting configuration settings."""

    github_token: str = Field(default="", alias="GITHUB_TOKEN")
    github_base_api: str = Field(default="https://api.github.com", alias="GITHUB_BASE_API")
    github_owner: str = Field(default="", alias="GITHUB_OWNER")
    github_timeout_seconds: float = Field(default=30.0, alias="GITHUB_TIMEOUT_SECONDS")

    @field_validator("github_base_api")
    @classmethod
    def validate_github_base_api(cls, v: str) -> str:
        """Strip the trailing slash so paths can be appended."""
        return v.rstrip("/")


class MonitoringConfig(BaseSettings):
    """Monitoring configuration settings."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_json", mode="before")
    @classmethod
    def validate_log_json(cls, v) -> bool:
        """Convert string boolean values to actual boolean."""
        return str_to_bool(v)


class ApplicationConfig(
    ServerConfig,
    RedisConfig,
    RateLimitConfig,
    AgentConfig,
    GitHubConfig,
    MonitoringConfig,
    BaseSettings
):
    """Main application configuration that combines all configuration domains."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
