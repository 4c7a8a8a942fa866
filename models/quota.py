"""Quota management models."""

from pydantic import BaseModel, Field


class QuotaDecision(BaseModel):
    """Result of admitting a request against the caller's daily quota."""

    ip: str = Field(..., description="Client IP the quota is keyed by")
    limit: int = Field(..., ge=1, description="Configured daily request limit")
    remaining: int = Field(..., description="Counter value after this request was counted")
    first_request: bool = Field(
        default=False, description="Whether this request created the counter"
    )
