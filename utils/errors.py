"""Application-level exception types.

Every failure the HTTP surface can report is classified here, at the boundary
nearest its origin, and carries the HTTP status it renders as.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional


@dataclass(eq=False)
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for clients and logs.
    """

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    status_code: ClassVar[int] = 500

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Malformed or missing request fields."""

    status_code = 400


class QuotaExceededError(AppError):
    """The caller's daily request allowance is used up."""

    status_code = 429

    @classmethod
    def for_limit(cls, limit: int) -> "QuotaExceededError":
        return cls(
            code="quota_exceeded",
            message=(
                f"You have exceeded the daily limit of {limit} requests. "
                "Please try again tomorrow."
            ),
            details={"limit": limit},
        )


class StoreUnavailableError(AppError):
    """The counter/session store cannot be reached."""

    status_code = 503


class UpstreamAgentError(AppError):
    """The conversational agent rejected or failed the call."""

    status_code = 400


class AgentRateLimitedError(UpstreamAgentError):
    status_code = 429


class AgentUnavailableError(UpstreamAgentError):
    status_code = 502


class AgentUnauthorizedError(UpstreamAgentError):
    status_code = 401


@dataclass(eq=False)
class RepositoryHostingError(AppError):
    """A repository-hosting API call failed; status mirrors the upstream class."""

    http_status: int = 400

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return self.http_status
