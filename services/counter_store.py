"""Counter store interface shared by the rate limiter and the session coordinator.

The store holds two kinds of records: per-IP quota counters and per-token
continuation handles. Implementations must make ``decrement`` atomic for a
single key; nothing is required to be atomic across keys.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class CounterStore(ABC):
    """Async key-value store with per-key expiry."""

    async def connect(self) -> None:
        """Open the underlying connection, if any."""

    async def disconnect(self) -> None:
        """Release the underlying connection, if any."""

    @abstractmethod
    async def is_connected(self) -> bool:
        """Report whether the store is reachable."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None when absent or expired."""

    @abstractmethod
    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        """Write ``value`` and (re)start its expiry clock at ``ttl_seconds``."""

    @abstractmethod
    async def decrement(self, key: str) -> int:
        """Atomically decrement an integer value and return the new value.

        The expiry of an existing key is left untouched.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abstractmethod
    async def ttl(self, key: str) -> Optional[int]:
        """Seconds until ``key`` expires, or None when absent or persistent."""

    async def health_check(self) -> Dict[str, Any]:
        """Round-trip a short-lived probe key through the store."""
        try:
            if not await self.is_connected():
                return {"status": "unhealthy", "error": "Store not connected"}

            probe_key = f"health_check_probe:{uuid.uuid4()}"
            await self.set_with_expiry(probe_key, "ok", 5)
            value = await self.get(probe_key)
            await self.delete(probe_key)

            if value == "ok":
                return {"status": "healthy"}
            return {"status": "unhealthy", "error": "Store round-trip failed"}
        except Exception as e:
            return {"status": "unhealthy", "error": str(e)}
