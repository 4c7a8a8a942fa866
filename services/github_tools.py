"""Repository tools exposed to the coding agent as function calls.

Only create, read, update and publish operations exist. Nothing here can
delete a file or a repository.
"""

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from models import CreateFileRequest, CreateRepoRequest, EnablePagesRequest, ReadFileRequest
from utils import AppError, create_contextual_logger
from .github_client import GitHubClient
from .metrics import agent_tool_calls_total

_OWNER_REPO = {
    "owner": {
        "type": "string",
        "description": "Repository owner login. Defaults to the configured owner.",
    },
    "repo": {"type": "string", "description": "Repository name"},
}

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": "create_repository",
        "description": (
            "Create a new GitHub repository. Call at most once per conversation; "
            "returns the repository URL."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Repository name"},
                "description": {"type": "string"},
                "private": {"type": "boolean"},
            },
            "required": ["name"],
        },
    },
    {
        "name": "create_file",
        "description": "Create a new file in the repository.",
        "parameters": {
            "type": "object",
            "properties": {
                **_OWNER_REPO,
                "path": {"type": "string", "description": "File path, e.g. index.html"},
                "content": {"type": "string", "description": "Full file content"},
                "message": {"type": "string", "description": "Commit message"},
                "branch": {"type": "string"},
            },
            "required": ["repo", "path", "content"],
        },
    },
    {
        "name": "read_file",
        "description": "Read a file from the repository.",
        "parameters": {
            "type": "object",
            "properties": {
                **_OWNER_REPO,
                "path": {"type": "string"},
                "branch": {"type": "string"},
            },
            "required": ["repo", "path"],
        },
    },
    {
        "name": "update_file",
        "description": (
            "Replace the entire content of an existing file. Pass the whole new "
            "content, not a fragment."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                **_OWNER_REPO,
                "path": {"type": "string"},
                "content": {"type": "string"},
                "message": {"type": "string"},
                "branch": {"type": "string"},
            },
            "required": ["repo", "path", "content"],
        },
    },
    {
        "name": "enable_github_pages",
        "description": "Publish the repository with GitHub Pages; returns the site URL.",
        "parameters": {
            "type": "object",
            "properties": {
                **_OWNER_REPO,
                "branch": {"type": "string"},
                "path": {"type": "string", "description": "Source folder, '/' or '/docs'"},
            },
            "required": ["repo"],
        },
    },
    {
        "name": "get_github_pages_url",
        "description": "Look up the published GitHub Pages URL of the repository.",
        "parameters": {
            "type": "object",
            "properties": {**_OWNER_REPO},
            "required": ["repo"],
        },
    },
]


class GitHubToolbox:
    """Dispatches agent function calls onto ``GitHubClient``."""

    def __init__(self, client: GitHubClient, default_owner: Optional[str] = None) -> None:
        self.client = client
        self.default_owner = default_owner or client.owner
        self.logger = create_contextual_logger(__name__, service="github_tools")
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
            "create_repository": self._create_repository,
            "create_file": self._create_file,
            "read_file": self._read_file,
            "update_file": self._update_file,
            "enable_github_pages": self._enable_pages,
            "get_github_pages_url": self._get_pages_url,
        }

    @staticmethod
    def definitions() -> List[Dict[str, Any]]:
        """Function tool schemas in Responses API format."""
        return [{"type": "function", "strict": False, **tool} for tool in TOOL_DEFINITIONS]

    def _with_owner(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        if not arguments.get("owner"):
            arguments = {**arguments, "owner": self.default_owner}
        return arguments

    async def dispatch(self, name: str, arguments_json: str) -> str:
        """Run one tool call and return its JSON-encoded output.

        Failures are returned to the model as ``{"error": ...}`` so it can
        react; they are never raised to the caller.
        """
        handler = self._handlers.get(name)
        if handler is None:
            agent_tool_calls_total.labels(tool="unknown", status="error").inc()
            self.logger.warning("Unknown tool requested", tool=name)
            return json.dumps({"error": f"Unknown tool: {name}"})

        try:
            arguments = json.loads(arguments_json or "{}")
            if not isinstance(arguments, dict):
                raise ValueError("arguments must be a JSON object")
            result = await handler(arguments)
        except (ValueError, ValidationError) as e:
            agent_tool_calls_total.labels(tool=name, status="invalid_arguments").inc()
            self.logger.warning("Invalid tool arguments", tool=name, error=str(e))
            return json.dumps({"error": f"Invalid arguments: {e}"})
        except AppError as e:
            agent_tool_calls_total.labels(tool=name, status="error").inc()
            self.logger.warning(
                "Tool call failed",
                tool=name,
                error_code=e.code,
                status_code=e.status_code,
            )
            return json.dumps({"error": e.message, "code": e.code})

        agent_tool_calls_total.labels(tool=name, status="success").inc()
        self.logger.info("Tool call completed", tool=name)
        return json.dumps(result)

    async def _create_repository(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        repo = await self.client.create_repository(CreateRepoRequest(**arguments))
        return {
            "name": repo.name,
            "owner": repo.owner.login,
            "html_url": repo.html_url,
            "default_branch": repo.default_branch,
        }

    async def _create_file(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        entry = await self.client.create_file(CreateFileRequest(**self._with_owner(arguments)))
        return {"path": entry.path, "sha": entry.sha, "html_url": entry.html_url}

    async def _read_file(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        file = await self.client.read_file(ReadFileRequest(**self._with_owner(arguments)))
        return {"path": file.path, "content": file.content, "sha": file.sha}

    async def _update_file(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        entry = await self.client.update_file(CreateFileRequest(**self._with_owner(arguments)))
        return {"path": entry.path, "sha": entry.sha, "html_url": entry.html_url}

    async def _enable_pages(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        pages = await self.client.enable_pages(EnablePagesRequest(**self._with_owner(arguments)))
        return {"html_url": pages.html_url, "status": pages.status}

    async def _get_pages_url(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        arguments = self._with_owner(arguments)
        if not arguments.get("repo") or not arguments.get("owner"):
            raise ValueError("owner and repo are required")
        url = await self.client.get_pages_url(arguments["owner"], arguments["repo"])
        return {"html_url": url}
