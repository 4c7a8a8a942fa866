"""Middleware for request IDs and client IP context in FastAPI requests."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from utils import (
    clear_client_ip,
    clear_correlation_id,
    get_client_ip,
    get_logger,
    set_client_ip,
    set_correlation_id,
)

logger = get_logger(__name__)


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware to bind a request ID and the client IP to each request."""

    def __init__(self, app, correlation_header: str = "X-Request-ID", trust_proxy: bool = True):
        super().__init__(app)
        self.correlation_header = correlation_header
        self.trust_proxy = trust_proxy

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Set request ID and client IP for the request context."""
        correlation_id = request.headers.get(self.correlation_header) or str(uuid.uuid4())
        client_ip = get_client_ip(
            request.headers,
            request.client.host if request.client else None,
            trust_proxy=self.trust_proxy,
        )

        set_correlation_id(correlation_id)
        set_client_ip(client_ip)

        # Route handlers and exception handlers read these from request state
        request.state.correlation_id = correlation_id
        request.state.client_ip = client_ip

        logger.info(
            f"HTTP request received: {request.method} {request.url.path}",
            method=request.method,
            path=request.url.path,
            user_agent=request.headers.get("user-agent"),
        )

        try:
            response = await call_next(request)
            response.headers[self.correlation_header] = correlation_id

            logger.info(
                f"HTTP request completed: {request.method} {request.url.path}",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                success=200 <= response.status_code < 400,
            )
            return response
        finally:
            clear_correlation_id()
            clear_client_ip()
