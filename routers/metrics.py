"""Metrics router for the chat relay."""

from fastapi import APIRouter, Response

from services.metrics import METRICS_CONTENT_TYPE, render_metrics
from utils import get_logger

router = APIRouter(tags=["metrics"])
logger = get_logger(__name__)


@router.get("/metrics", response_class=Response)
async def prometheus_metrics() -> Response:
    """Get Prometheus metrics in text format."""
    try:
        return Response(content=render_metrics(), media_type=METRICS_CONTENT_TYPE)
    except Exception as e:
        logger.error(
            "Failed to retrieve Prometheus metrics",
            error=str(e),
            endpoint="/metrics",
        )
        return Response(
            content=f"# ERROR: Failed to retrieve metrics - {e}\n",
            media_type=METRICS_CONTENT_TYPE,
            status_code=503,
        )
