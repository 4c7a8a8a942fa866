"""Unit tests for the session coordinator."""

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest

from services.rate_limiter import quota_key
from services.session_coordinator import SessionCoordinator, session_key
from utils import AgentRateLimitedError, AgentUnavailableError, StoreUnavailableError

IP = "198.51.100.20"
HOUR = 3600


class TestSessionCoordinator:
    """Test cases for SessionCoordinator."""

    @pytest.fixture
    def coordinator(self, mock_config, memory_store, mock_agent_client, rate_limiter) -> SessionCoordinator:
        return SessionCoordinator(mock_config, memory_store, mock_agent_client, rate_limiter)

    @pytest.mark.asyncio
    async def test_new_conversation_issues_token(self, coordinator, memory_store, mock_agent_client) -> None:
        result = await coordinator.process_turn("hello", None, IP, request_id="req-1")

        assert result.is_new_token is True
        assert uuid.UUID(result.token).version == 4
        assert result.message == "Hello from the agent"
        assert result.response_id == "resp_001"
        mock_agent_client.process_message.assert_awaited_once_with(
            "hello", last_response_id=None, request_id="req-1"
        )
        assert await memory_store.get(session_key(result.token)) == "resp_001"
        assert await memory_store.ttl(session_key(result.token)) == HOUR

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self, coordinator) -> None:
        first = await coordinator.process_turn("hi", None, IP)
        second = await coordinator.process_turn("hi", None, IP)

        assert first.token != second.token

    @pytest.mark.asyncio
    async def test_existing_token_continues_conversation(
        self, coordinator, memory_store, mock_agent_client, reply_factory
    ) -> None:
        first = await coordinator.process_turn("hello", None, IP)
        mock_agent_client.process_message.return_value = reply_factory(
            response="Second answer", conversation_id="resp_002"
        )

        second = await coordinator.process_turn("and then?", first.token, IP)

        assert second.is_new_token is False
        assert second.token == first.token
        assert second.response_id == "resp_002"
        mock_agent_client.process_message.assert_awaited_with(
            "and then?", last_response_id="resp_001", request_id=None
        )
        assert await memory_store.get(session_key(first.token)) == "resp_002"

    @pytest.mark.asyncio
    async def test_handle_write_refreshes_expiry(self, coordinator, memory_store, clock, reply_factory, mock_agent_client) -> None:
        first = await coordinator.process_turn("hello", None, IP)
        clock.advance(HOUR - 10)
        mock_agent_client.process_message.return_value = reply_factory(conversation_id="resp_002")

        await coordinator.process_turn("again", first.token, IP)

        assert await memory_store.ttl(session_key(first.token)) == HOUR

    @pytest.mark.asyncio
    async def test_expired_handle_starts_fresh_with_same_token(
        self, coordinator, mock_agent_client, clock
    ) -> None:
        first = await coordinator.process_turn("hello", None, IP)
        clock.advance(HOUR + 1)

        second = await coordinator.process_turn("still there?", first.token, IP)

        assert second.token == first.token
        assert second.is_new_token is False
        mock_agent_client.process_message.assert_awaited_with(
            "still there?", last_response_id=None, request_id=None
        )

    @pytest.mark.asyncio
    async def test_unknown_token_is_not_an_error(self, coordinator, mock_agent_client) -> None:
        result = await coordinator.process_turn("hi", "client-made-up-token", IP)

        assert result.token == "client-made-up-token"
        assert result.is_new_token is False
        mock_agent_client.process_message.assert_awaited_once_with(
            "hi", last_response_id=None, request_id=None
        )

    @pytest.mark.asyncio
    async def test_remaining_is_read_fresh(self, coordinator, rate_limiter) -> None:
        await rate_limiter.check_and_consume(IP)
        await rate_limiter.check_and_consume(IP)

        result = await coordinator.process_turn("hi", None, IP)

        assert result.remaining_requests == 18

    @pytest.mark.asyncio
    async def test_remaining_is_clamped_at_zero(self, coordinator, memory_store) -> None:
        await memory_store.set_with_expiry(quota_key(IP), "-3", 86400)

        result = await coordinator.process_turn("hi", None, IP)

        assert result.remaining_requests == 0

    @pytest.mark.asyncio
    async def test_metadata_is_passed_through(self, coordinator) -> None:
        result = await coordinator.process_turn("hi", None, IP)

        assert result.ai_metadata.model == "test-model"
        assert result.ai_metadata.tokens == 42
        assert result.ai_metadata.processing_time == 12.5
        assert result.ai_metadata.conversation_id == "resp_001"

    @pytest.mark.asyncio
    async def test_missing_metadata_does_not_fail_turn(self, coordinator, mock_agent_client, reply_factory) -> None:
        mock_agent_client.process_message.return_value = reply_factory()

        result = await coordinator.process_turn("hi", None, IP)

        assert result.ai_metadata.model is None
        assert result.ai_metadata.conversation_id == "resp_001"

    @pytest.mark.asyncio
    async def test_agent_error_persists_nothing(self, coordinator, memory_store, mock_agent_client) -> None:
        first = await coordinator.process_turn("hello", None, IP)
        mock_agent_client.process_message.side_effect = AgentRateLimitedError(
            code="agent_rate_limited", message="AI service rate limit exceeded"
        )

        with pytest.raises(AgentRateLimitedError):
            await coordinator.process_turn("again", first.token, IP)

        assert await memory_store.get(session_key(first.token)) == "resp_001"
        assert mock_agent_client.process_message.await_count == 2

    @pytest.mark.asyncio
    async def test_agent_timeout_is_unavailable(self, mock_config, memory_store, rate_limiter, config_factory) -> None:
        async def slow_reply(*args, **kwargs):
            await asyncio.sleep(1)

        agent = AsyncMock()
        agent.process_message = AsyncMock(side_effect=slow_reply)
        coordinator = SessionCoordinator(
            config_factory(ai_timeout_seconds=0.05), memory_store, agent, rate_limiter
        )

        with pytest.raises(AgentUnavailableError) as exc_info:
            await coordinator.process_turn("hi", "tok-1", IP)

        assert exc_info.value.code == "agent_timeout"
        assert exc_info.value.status_code == 502
        assert await memory_store.get(session_key("tok-1")) is None

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, mock_config, mock_agent_client, rate_limiter) -> None:
        store = AsyncMock()
        store.get = AsyncMock(
            side_effect=StoreUnavailableError(code="store_unavailable", message="down")
        )
        coordinator = SessionCoordinator(mock_config, store, mock_agent_client, rate_limiter)

        with pytest.raises(StoreUnavailableError):
            await coordinator.process_turn("hi", "tok-1", IP)

        mock_agent_client.process_message.assert_not_awaited()
