"""Chat turn orchestration: token resolution, agent call, handle persistence."""

import asyncio
import time
import uuid
from typing import Optional, Tuple

from config import ApplicationConfig
from models import AgentReply, ChatAIMetadata, ChatTurnResult
from utils import AgentUnavailableError, UpstreamAgentError, create_contextual_logger
from .agent_client import AgentClient
from .counter_store import CounterStore
from .metrics import agent_call_duration_seconds, chat_turns_total
from .rate_limiter import RateLimiter


def session_key(token: str) -> str:
    return f"token:{token}:last_response_id"


class SessionCoordinator:
    """Runs one chat turn for an already admitted request."""

    def __init__(
        self,
        config: ApplicationConfig,
        store: CounterStore,
        agent_client: AgentClient,
        rate_limiter: RateLimiter,
    ) -> None:
        self.config = config
        self.store = store
        self.agent_client = agent_client
        self.rate_limiter = rate_limiter
        self.session_ttl_seconds = config.session_ttl_seconds
        self.logger = create_contextual_logger(__name__, service="session_coordinator")

    async def _resolve_token(self, token: Optional[str]) -> Tuple[str, bool, Optional[str]]:
        if not token:
            return str(uuid.uuid4()), True, None

        last_response_id = await self.store.get(session_key(token))
        if last_response_id is None:
            self.logger.info("No continuation handle for token, starting fresh", token=token)
        return token, False, last_response_id

    async def _call_agent(
        self, message: str, last_response_id: Optional[str], request_id: Optional[str]
    ) -> AgentReply:
        start = time.perf_counter()
        try:
            return await asyncio.wait_for(
                self.agent_client.process_message(
                    message, last_response_id=last_response_id, request_id=request_id
                ),
                timeout=self.config.ai_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise AgentUnavailableError(
                code="agent_timeout",
                message="AI service is temporarily unavailable",
                details={"timeout_seconds": self.config.ai_timeout_seconds},
            ) from e
        finally:
            agent_call_duration_seconds.observe(time.perf_counter() - start)

    async def process_turn(
        self,
        message: str,
        token: Optional[str],
        ip: str,
        request_id: Optional[str] = None,
    ) -> ChatTurnResult:
        """Run one turn of the conversation identified by ``token``.

        A missing token starts a new conversation; a token whose handle has
        expired continues under the same token without prior context.

        Raises:
            UpstreamAgentError: The agent failed; nothing is persisted.
            StoreUnavailableError: The store could not be reached.
        """
        token, is_new_token, last_response_id = await self._resolve_token(token)

        self.logger.info(
            "Processing chat turn",
            request_id=request_id,
            ip=ip,
            is_new_token=is_new_token,
            has_last_response_id=last_response_id is not None,
        )

        try:
            reply = await self._call_agent(message, last_response_id, request_id)
        except UpstreamAgentError as e:
            chat_turns_total.labels(status="agent_error").inc()
            self.logger.warning(
                "Agent call failed",
                request_id=request_id,
                error_code=e.code,
                status_code=e.status_code,
            )
            raise

        await self.store.set_with_expiry(
            session_key(token), reply.conversation_id, self.session_ttl_seconds
        )

        remaining = await self.rate_limiter.remaining(ip)
        chat_turns_total.labels(status="success").inc()

        self.logger.info(
            "Chat turn completed",
            request_id=request_id,
            is_new_token=is_new_token,
            remaining_requests=remaining,
        )

        return ChatTurnResult(
            message=reply.response,
            token=token,
            response_id=reply.conversation_id,
            is_new_token=is_new_token,
            remaining_requests=max(0, remaining),
            ai_metadata=self._build_metadata(reply),
        )

    @staticmethod
    def _build_metadata(reply: AgentReply) -> ChatAIMetadata:
        metadata = reply.metadata
        if metadata is None:
            return ChatAIMetadata(conversation_id=reply.conversation_id)
        return ChatAIMetadata(
            model=metadata.model,
            tokens=metadata.tokens,
            processing_time=metadata.processing_time,
            conversation_id=reply.conversation_id,
        )
