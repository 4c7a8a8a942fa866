"""Probe endpoint models."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceInfo(BaseModel):
    """Body of ``GET /``."""

    message: str = Field(default="Backend is running!")
    timestamp: datetime = Field(default_factory=_utcnow)
    version: str = Field(..., description="Application version")


class HealthStatus(BaseModel):
    """Liveness response."""

    status: str = Field(..., description="Overall health status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Status timestamp")
    version: str = Field(..., description="Application version")
    uptime_seconds: int = Field(..., ge=0, description="Uptime in seconds")
    components: Optional[Dict[str, Dict[str, Any]]] = Field(
        default=None, description="Per-dependency health, detailed probe only"
    )
