"""Redis-backed counter store.

This module provides Redis connectivity and the key/expiry primitives the
rate limiter and session coordinator rely on.
"""

from typing import Any, Awaitable, Dict, Optional, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from config import ApplicationConfig
from utils import StoreUnavailableError, create_contextual_logger, log_exception
from .counter_store import CounterStore


class RedisCounterStore(CounterStore):
    """Async Redis store sharing one connection pool across the process."""

    def __init__(self, config: ApplicationConfig) -> None:
        """Initialize Redis store."""
        self.config = config
        self.logger = create_contextual_logger(__name__, service="redis_store")
        self._pool: Optional[redis.ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._connected = False

    async def connect(self) -> None:
        """Establish Redis connection."""
        try:
            self._pool = redis.ConnectionPool(
                host=self.config.redis_host,
                port=self.config.redis_port,
                password=self.config.redis_password,
                db=self.config.redis_db,
                socket_timeout=self.config.redis_socket_timeout,
                retry_on_timeout=self.config.redis_retry_on_timeout,
                max_connections=self.config.redis_max_connections,
            )
            self._client = redis.Redis(connection_pool=self._pool)

            await self._client.ping()
            self._connected = True

            self.logger.info(
                "Redis connection established successfully",
                serviceName="RedisCounterStore",
                operationName="connect",
                host=self.config.redis_host,
                port=self.config.redis_port,
                db=self.config.redis_db,
                success=True,
            )
        except Exception as e:
            log_exception(
                self.logger,
                e,
                "Redis connection failed: RedisCounterStore.connect",
                serviceName="RedisCounterStore",
                operationName="connect",
                host=self.config.redis_host,
                port=self.config.redis_port,
                db=self.config.redis_db,
            )
            raise StoreUnavailableError(
                code="store_unavailable",
                message=f"Redis at {self.config.redis_host}:{self.config.redis_port} is unreachable",
            ) from e

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._connected = False
            self.logger.info("Disconnected from Redis")

    async def is_connected(self) -> bool:
        """Check Redis connection status."""
        if not self._client or not self._connected:
            return False

        try:
            await self._client.ping()
            return True
        except Exception:
            self._connected = False
            return False

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise StoreUnavailableError(
                code="store_unavailable",
                message="Redis store is not connected",
            )
        return self._client

    def _unavailable(self, e: Exception, operation: str, key: str) -> StoreUnavailableError:
        self.logger.error(
            "Redis operation failed",
            operationName=operation,
            key=key,
            error=str(e),
        )
        return StoreUnavailableError(
            code="store_unavailable",
            message="The session and quota store is temporarily unavailable",
            details={"operation": operation},
        )

    async def get(self, key: str) -> Optional[str]:
        """Get value from Redis."""
        client = self._require_client()
        try:
            value = await client.get(key)
        except RedisError as e:
            raise self._unavailable(e, "get", key) from e

        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        """Set value in Redis with a TTL (SETEX)."""
        client = self._require_client()
        try:
            await client.setex(key, ttl_seconds, value)
        except RedisError as e:
            raise self._unavailable(e, "setex", key) from e

        self.logger.debug("Value stored", key=key, ttl=ttl_seconds)

    async def decrement(self, key: str) -> int:
        """Decrement an integer value (DECR is atomic per key)."""
        client = self._require_client()
        try:
            return int(await cast(Awaitable[int], client.decr(key)))
        except RedisError as e:
            raise self._unavailable(e, "decr", key) from e

    async def delete(self, key: str) -> None:
        """Delete value from Redis."""
        client = self._require_client()
        try:
            await client.delete(key)
        except RedisError as e:
            raise self._unavailable(e, "delete", key) from e

    async def ttl(self, key: str) -> Optional[int]:
        """Remaining TTL in seconds; Redis reports -2 for missing and -1 for persistent keys."""
        client = self._require_client()
        try:
            remaining = int(await cast(Awaitable[int], client.ttl(key)))
        except RedisError as e:
            raise self._unavailable(e, "ttl", key) from e
        return remaining if remaining >= 0 else None

    async def health_check(self) -> Dict[str, Any]:
        """Perform Redis health check."""
        result = await super().health_check()
        if result["status"] == "healthy":
            result.update(
                backend="redis",
                host=self.config.redis_host,
                port=self.config.redis_port,
                db=self.config.redis_db,
            )
        return result
