"""In-memory counter store.

Per-process only: every worker keeps its own counters, so running several
workers multiplies the effective daily limit. Used by the test suite and for
local runs with ``STORE_BACKEND=memory``.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .counter_store import CounterStore


@dataclass
class _Entry:
    value: str
    expires_at: Optional[float]


class InMemoryCounterStore(CounterStore):
    """Dictionary-backed store with lazy expiry and a lock around mutations."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the store.

        Args:
            clock: Time source in seconds; injectable so tests can fast-forward expiry.
        """
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    async def is_connected(self) -> bool:
        return True

    def _live_entry(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        entry = self._live_entry(key)
        return entry.value if entry else None

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        async with self._lock:
            self._entries[key] = _Entry(value=str(value), expires_at=self._clock() + ttl_seconds)

    async def decrement(self, key: str) -> int:
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                # Matches Redis DECR on a missing key: starts from 0, no expiry.
                entry = _Entry(value="0", expires_at=None)
                self._entries[key] = entry
            try:
                new_value = int(entry.value) - 1
            except ValueError as e:
                raise ValueError(f"value at {key!r} is not an integer") from e
            entry.value = str(new_value)
            return new_value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def ttl(self, key: str) -> Optional[int]:
        entry = self._live_entry(key)
        if entry is None or entry.expires_at is None:
            return None
        return math.ceil(entry.expires_at - self._clock())

    async def health_check(self) -> Dict[str, Any]:
        result = await super().health_check()
        result["backend"] = "memory"
        return result
