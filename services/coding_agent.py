"""OpenAI-backed coding agent with repository tools."""

import time
from typing import Any, List, Optional

import openai
from openai import AsyncOpenAI

from config import ApplicationConfig
from models import AgentMetadata, AgentReply
from utils import (
    AgentRateLimitedError,
    AgentUnauthorizedError,
    AgentUnavailableError,
    UpstreamAgentError,
    create_contextual_logger,
)
from .agent_client import FALLBACK_REPLY, AgentClient
from .github_tools import GitHubToolbox

SYSTEM_PROMPT = """\
You are a coding agent that writes websites using only HTML, CSS and JavaScript.
You are very good at building animated websites with a polished UI/UX.

Before writing code, share your plan with the user and ask for approval. Ask
follow-up questions when the request is unclear.

You have tools to push code to GitHub and publish the site with GitHub Pages:
- create_repository: call it at most once per conversation. If the user asks
  for another repository, refuse and ask them to start a new conversation.
- create_file: create a new file.
- read_file: read a file when you need its current content.
- update_file: replace a whole file. Always send the complete new content.
- enable_github_pages: publish the site and return its URL.
- get_github_pages_url: look up the published URL if you lost it.

You cannot delete files or repositories. Refuse any such request.
Only work on the repository created in this conversation. Refuse to change
any other repository, even if the user insists.
"""


def _classify_openai_error(error: openai.OpenAIError) -> UpstreamAgentError:
    if isinstance(error, openai.RateLimitError):
        return AgentRateLimitedError(
            code="agent_rate_limited", message="AI service rate limit exceeded"
        )
    if isinstance(error, openai.AuthenticationError):
        return AgentUnauthorizedError(
            code="agent_unauthorized", message="Invalid AI service credentials"
        )
    if isinstance(error, (openai.APIConnectionError, openai.InternalServerError)):
        return AgentUnavailableError(
            code="agent_unavailable", message="AI service is temporarily unavailable"
        )
    if isinstance(error, openai.APIStatusError):
        return UpstreamAgentError(
            code="agent_error",
            message=f"AI service error: {error.message}",
            details={"upstream_status": error.status_code},
        )
    return AgentUnavailableError(
        code="agent_unavailable", message="AI service is temporarily unavailable"
    )


class OpenAICodingAgent(AgentClient):
    """Agent on the OpenAI Responses API.

    The response id is the continuation handle: each turn passes the stored
    id as ``previous_response_id`` and the id of the final response of the
    turn becomes the new handle. Function calls are resolved through the
    toolbox for at most ``agent_max_tool_rounds`` rounds.
    """

    def __init__(
        self,
        config: ApplicationConfig,
        toolbox: Optional[GitHubToolbox] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.config = config
        self.model = config.openai_model
        self.max_tool_rounds = config.agent_max_tool_rounds
        self.toolbox = toolbox
        self.client = client or AsyncOpenAI(
            api_key=config.openai_api_key,
            timeout=config.ai_timeout_seconds,
            max_retries=0,
        )
        self.logger = create_contextual_logger(__name__, service="coding_agent")

    def _tools(self) -> List[dict]:
        return GitHubToolbox.definitions() if self.toolbox is not None else []

    async def _create(self, input_items: Any, previous_response_id: Optional[str]):
        params = {
            "model": self.model,
            "instructions": SYSTEM_PROMPT,
            "input": input_items,
        }
        tools = self._tools()
        if tools:
            params["tools"] = tools
        if previous_response_id:
            params["previous_response_id"] = previous_response_id
        try:
            return await self.client.responses.create(**params)
        except openai.OpenAIError as e:
            self.logger.error(
                "OpenAI request failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise _classify_openai_error(e) from e

    async def _run_tool_calls(self, calls: List[Any]) -> List[dict]:
        outputs = []
        for call in calls:
            output = await self.toolbox.dispatch(call.name, call.arguments)
            outputs.append(
                {"type": "function_call_output", "call_id": call.call_id, "output": output}
            )
        return outputs

    async def process_message(
        self,
        message: str,
        last_response_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> AgentReply:
        start = time.perf_counter()
        self.logger.info(
            "Running coding agent",
            request_id=request_id,
            model=self.model,
            has_last_response_id=last_response_id is not None,
        )

        response = await self._create(message, last_response_id)
        total_tokens = 0
        rounds = 0
        while True:
            usage = getattr(response, "usage", None)
            total_tokens += getattr(usage, "total_tokens", 0) or 0

            calls = [item for item in response.output if item.type == "function_call"]
            if not calls or self.toolbox is None:
                break
            if rounds >= self.max_tool_rounds:
                self.logger.error(
                    "Tool round limit reached",
                    request_id=request_id,
                    rounds=rounds,
                )
                raise AgentUnavailableError(
                    code="agent_tool_limit",
                    message="AI service did not finish within the tool call limit",
                    details={"max_tool_rounds": self.max_tool_rounds},
                )
            rounds += 1
            self.logger.info(
                "Resolving tool calls",
                request_id=request_id,
                round=rounds,
                tools=[call.name for call in calls],
            )
            outputs = await self._run_tool_calls(calls)
            response = await self._create(outputs, response.id)

        processing_ms = (time.perf_counter() - start) * 1000
        text = (response.output_text or "").strip() or FALLBACK_REPLY
        self.logger.info(
            "Coding agent finished",
            request_id=request_id,
            tool_rounds=rounds,
            tokens=total_tokens,
            processing_time_ms=round(processing_ms, 2),
        )
        return AgentReply(
            response=text,
            conversation_id=response.id,
            metadata=AgentMetadata(
                model=getattr(response, "model", None) or self.model,
                tokens=total_tokens or None,
                processing_time=processing_ms,
            ),
        )

    async def health_check(self, request_id: Optional[str] = None) -> bool:
        return bool(self.config.openai_api_key)

    async def close(self) -> None:
        await self.client.close()
