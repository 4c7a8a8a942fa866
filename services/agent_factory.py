"""Factory for the configured agent client."""

from typing import Optional

from config import ApplicationConfig
from utils import ValidationAppError
from .agent_client import AgentClient, HttpAgentClient
from .coding_agent import OpenAICodingAgent
from .github_client import GitHubClient
from .github_tools import GitHubToolbox


def create_agent_client(
    config: ApplicationConfig,
    github_client: Optional[GitHubClient] = None,
) -> AgentClient:
    """Instantiate the agent client selected by ``AGENT_PROVIDER``.

    Args:
        config: Application configuration.
        github_client: Client backing the repository tools. When omitted and
            a GitHub token is configured, one is created.

    Returns:
        AgentClient: Configured agent client.

    Raises:
        ValidationAppError: If provider-specific requirements are not met.
    """
    provider = config.agent_provider

    if provider == "http":
        return HttpAgentClient(config)

    if provider == "openai":
        if not config.openai_api_key:
            raise ValidationAppError(
                code="agent_missing_api_key",
                message="OpenAI provider requires OPENAI_API_KEY environment variable",
            )
        if github_client is None and config.github_token:
            github_client = GitHubClient(config)
        toolbox = GitHubToolbox(github_client) if github_client is not None else None
        return OpenAICodingAgent(config, toolbox=toolbox)

    raise ValidationAppError(
        code="agent_unknown_provider",
        message=f"Unknown agent provider: '{provider}'. Supported providers: http, openai",
    )
