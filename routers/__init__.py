"""API routers for the chat relay."""

from .chat import router as chat_router
from .health import router as health_router
from .metrics import router as metrics_router

__all__ = ["chat_router", "health_router", "metrics_router"]
