"""Daily per-IP request quota.

Each IP gets ``limit`` admitted requests per rolling 24 hour window that
starts at its first request. The counter lives in the shared store as
``rate_limit:{ip}`` and holds the number of requests still allowed.

Known race, kept on purpose: the read and the decrement are two store calls,
not one compare-and-decrement. Concurrent requests from one IP can all read a
positive value before any decrement lands, so the IP may be over-admitted by
up to the number of requests in flight. DECR itself is atomic, so no
decrement is ever lost, and a request is never admitted once the value it
read is <= 0.

Only the chat route depends on the limiter; the health and metrics routes
never reach it.
"""

from config import ApplicationConfig
from models import QuotaDecision
from utils import QuotaExceededError, create_contextual_logger
from .counter_store import CounterStore
from .metrics import rate_limit_decisions_total


def quota_key(ip: str) -> str:
    return f"rate_limit:{ip}"


class RateLimiter:
    """Gate consulted once per admitted chat request."""

    def __init__(self, config: ApplicationConfig, store: CounterStore) -> None:
        self.config = config
        self.store = store
        self.limit = config.rate_limit_per_day
        self.window_seconds = config.rate_limit_window_seconds
        self.logger = create_contextual_logger(__name__, service="rate_limiter")

    async def check_and_consume(self, ip: str) -> QuotaDecision:
        """Admit the request and count it, or raise when the quota is used up.

        Args:
            ip: Client IP the quota is keyed by.

        Returns:
            QuotaDecision describing the admitted request.

        Raises:
            QuotaExceededError: The stored counter is already <= 0. The counter
                is left unchanged.
            StoreUnavailableError: The store could not be reached.
        """
        key = quota_key(ip)
        raw = await self.store.get(key)

        if raw is None:
            initial = self.limit - 1
            await self.store.set_with_expiry(key, str(initial), self.window_seconds)
            rate_limit_decisions_total.labels(decision="initialized").inc()
            self.logger.info(
                "Rate limit initialized for new IP",
                ip=ip,
                initial_count=initial,
                limit=self.limit,
            )
            return QuotaDecision(ip=ip, limit=self.limit, remaining=initial, first_request=True)

        current = int(raw)
        if current <= 0:
            rate_limit_decisions_total.labels(decision="rejected").inc()
            self.logger.warning(
                "Rate limit exceeded",
                ip=ip,
                current_count=current,
                limit=self.limit,
            )
            raise QuotaExceededError.for_limit(self.limit)

        new_count = await self.store.decrement(key)
        if new_count < 0 and await self.store.ttl(key) is None:
            # The counter expired between the read and DECR, which recreated it
            # at -1 without a TTL. This request opens the next window.
            initial = self.limit - 1
            await self.store.set_with_expiry(key, str(initial), self.window_seconds)
            rate_limit_decisions_total.labels(decision="initialized").inc()
            self.logger.info(
                "Rate limit window rolled over during request",
                ip=ip,
                initial_count=initial,
                limit=self.limit,
            )
            return QuotaDecision(ip=ip, limit=self.limit, remaining=initial, first_request=True)

        rate_limit_decisions_total.labels(decision="admitted").inc()
        self.logger.info(
            "Rate limit check passed",
            ip=ip,
            previous_count=current,
            new_count=new_count,
        )
        return QuotaDecision(ip=ip, limit=self.limit, remaining=new_count)

    async def remaining(self, ip: str) -> int:
        """Current counter for ``ip``, or the full limit before its first request."""
        raw = await self.store.get(quota_key(ip))
        result = int(raw) if raw is not None else self.limit
        self.logger.debug(
            "Retrieved remaining requests count",
            ip=ip,
            remaining=result,
            first_time=raw is None,
        )
        return result
