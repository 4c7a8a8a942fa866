"""Conversational agent clients.

The session coordinator depends only on ``AgentClient``. ``HttpAgentClient``
talks to a remote agent runtime over HTTP; the OpenAI-backed coding agent
lives in ``services.coding_agent``.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections import namedtuple
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from config import ApplicationConfig
from models import AgentMetadata, AgentReply
from utils import (
    AgentRateLimitedError,
    AgentUnauthorizedError,
    AgentUnavailableError,
    UpstreamAgentError,
    create_contextual_logger,
)

FALLBACK_REPLY = "No response from AI service"

# Result object to pass between the worker thread and the event loop
SyncRequestResult = namedtuple("SyncRequestResult", ["status_code", "json_data", "error"])


class AgentClient(ABC):
    """Capability interface for the external conversational agent."""

    @abstractmethod
    async def process_message(
        self,
        message: str,
        last_response_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> AgentReply:
        """Send one user message, continuing from ``last_response_id`` when given.

        Raises:
            UpstreamAgentError: Or one of its subclasses, classified by cause.
        """

    async def health_check(self, request_id: Optional[str] = None) -> bool:
        return True

    async def close(self) -> None:
        """Release client resources."""


def classify_status(status_code: int, reason: str) -> UpstreamAgentError:
    """Map an agent HTTP status onto the upstream error taxonomy."""
    details = {"upstream_status": status_code}
    if status_code == 429:
        return AgentRateLimitedError(
            code="agent_rate_limited",
            message="AI service rate limit exceeded",
            details=details,
        )
    if status_code >= 500:
        return AgentUnavailableError(
            code="agent_unavailable",
            message="AI service is temporarily unavailable",
            details=details,
        )
    if status_code == 401:
        return AgentUnauthorizedError(
            code="agent_unauthorized",
            message="Invalid AI service credentials",
            details=details,
        )
    return UpstreamAgentError(
        code="agent_error",
        message=f"AI service error: {reason}",
        details=details,
    )


class HttpAgentClient(AgentClient):
    """Client for a remote agent runtime exposing ``POST /api/chat``."""

    def __init__(self, config: ApplicationConfig) -> None:
        self.config = config
        self.base_url = config.ai_server_url
        self.logger = create_contextual_logger(__name__, service="http_agent_client")

    def _headers(self, request_id: Optional[str]) -> Dict[str, str]:
        headers = {
            "User-Agent": f"Chat-Relay/{self.config.app_version}",
            "Content-Type": "application/json",
            "X-Request-ID": request_id or "",
        }
        if self.config.ai_api_key:
            headers["Authorization"] = f"Bearer {self.config.ai_api_key}"
        return headers

    def _execute_sync_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]],
        timeout: float,
        request_id: Optional[str],
    ) -> SyncRequestResult:
        """Executes a synchronous HTTP request and returns a result object."""
        try:
            with requests.Session() as session:
                response = session.request(
                    method=method.upper(),
                    url=self.base_url + endpoint,
                    json=data,
                    timeout=timeout,
                    headers=self._headers(request_id),
                )
        except requests.exceptions.RequestException as e:
            return SyncRequestResult(status_code=None, json_data=None, error=str(e))

        if response.status_code >= 400:
            return SyncRequestResult(
                status_code=response.status_code, json_data=None, error=response.reason or ""
            )
        try:
            return SyncRequestResult(status_code=response.status_code, json_data=response.json(), error=None)
        except ValueError as e:
            return SyncRequestResult(status_code=response.status_code, json_data=None, error=f"invalid JSON: {e}")

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]],
        timeout: float,
        request_id: Optional[str],
    ) -> SyncRequestResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._execute_sync_request, method, endpoint, data, timeout, request_id
        )

    async def process_message(
        self,
        message: str,
        last_response_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> AgentReply:
        start = time.perf_counter()
        payload = {
            "message": message,
            "lastResponseId": last_response_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        self.logger.info(
            "Calling AI service",
            request_id=request_id,
            has_last_response_id=last_response_id is not None,
            message_length=len(message),
        )

        result = await self._request(
            "POST", "/api/chat", payload, self.config.ai_timeout_seconds, request_id
        )
        processing_ms = (time.perf_counter() - start) * 1000

        if result.error is not None:
            self.logger.error(
                "AI service error response",
                request_id=request_id,
                status=result.status_code,
                error=result.error,
                processing_time_ms=round(processing_ms, 2),
            )
            if result.status_code is None:
                raise AgentUnavailableError(
                    code="agent_unavailable",
                    message="AI service is temporarily unavailable",
                    details={"reason": result.error},
                )
            if result.status_code < 400:
                raise AgentUnavailableError(
                    code="agent_bad_response",
                    message="AI service returned an unreadable response",
                )
            raise classify_status(result.status_code, result.error)

        return self._to_reply(result.json_data, processing_ms, request_id)

    def _to_reply(self, body: Any, processing_ms: float, request_id: Optional[str]) -> AgentReply:
        if not isinstance(body, dict):
            raise AgentUnavailableError(
                code="agent_bad_response",
                message="AI service returned an unreadable response",
            )

        raw_metadata = body.get("metadata") or {}
        try:
            metadata = AgentMetadata(
                model=raw_metadata.get("model"),
                tokens=raw_metadata.get("tokens"),
                processing_time=processing_ms,
            )
        except (AttributeError, ValidationError):
            metadata = AgentMetadata(processing_time=processing_ms)

        try:
            reply = AgentReply(
                response=body.get("response") or body.get("message") or FALLBACK_REPLY,
                conversation_id=body.get("conversationId"),
                metadata=metadata,
            )
        except ValidationError as e:
            self.logger.error(
                "AI service response failed validation",
                request_id=request_id,
                errors=e.errors(include_url=False),
            )
            raise AgentUnavailableError(
                code="agent_bad_response",
                message="AI service response is missing a conversation id",
            ) from e

        self.logger.info(
            "AI service response received",
            request_id=request_id,
            processing_time_ms=round(processing_ms, 2),
            response_length=len(reply.response),
            model=metadata.model,
        )
        return reply

    async def health_check(self, request_id: Optional[str] = None) -> bool:
        result = await self._request(
            "GET", "/health", None, self.config.ai_health_timeout_seconds, request_id
        )
        healthy = result.error is None and result.status_code == 200
        self.logger.info(
            "AI service health check result",
            request_id=request_id,
            healthy=healthy,
            status=result.status_code,
        )
        return healthy
