"""Probe routers for the chat relay. None of these consume quota."""

import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from config import ApplicationConfig
from models import HealthStatus, ServiceInfo
from services import AgentClient, CounterStore
from utils import get_logger
from .deps import get_agent_client, get_config, get_store

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


def _uptime_seconds(request: Request) -> int:
    start_time = getattr(request.app.state, "start_time", None) or time.time()
    return max(0, int(time.time() - start_time))


@router.get("/", response_model=ServiceInfo)
async def service_info(config: ApplicationConfig = Depends(get_config)) -> ServiceInfo:
    return ServiceInfo(version=config.app_version)


@router.get("/health", response_model=HealthStatus, response_model_exclude_none=True)
async def health_check(
    request: Request,
    config: ApplicationConfig = Depends(get_config),
) -> HealthStatus:
    """Liveness probe."""
    return HealthStatus(
        status="OK",
        version=config.app_version,
        uptime_seconds=_uptime_seconds(request),
    )


@router.get("/health/detailed", response_model=HealthStatus)
async def detailed_health_check(
    request: Request,
    config: ApplicationConfig = Depends(get_config),
    store: CounterStore = Depends(get_store),
    agent_client: AgentClient = Depends(get_agent_client),
) -> Any:
    """Health status with store and agent component information."""
    components: Dict[str, Dict[str, Any]] = {"store": await store.health_check()}

    try:
        agent_healthy = await agent_client.health_check(
            request_id=getattr(request.state, "correlation_id", None)
        )
        components["agent"] = {"status": "healthy" if agent_healthy else "unhealthy"}
    except Exception as e:
        logger.error("Agent health check failed", error=str(e), endpoint="/health/detailed")
        components["agent"] = {"status": "unhealthy", "error": str(e)}

    healthy = all(component.get("status") == "healthy" for component in components.values())
    status = HealthStatus(
        status="OK" if healthy else "DEGRADED",
        version=config.app_version,
        uptime_seconds=_uptime_seconds(request),
        components=components,
    )
    return JSONResponse(
        status_code=200 if healthy else 503,
        content=status.model_dump(mode="json"),
    )
