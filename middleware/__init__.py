"""HTTP middleware and exception handlers."""

from .correlation import CorrelationMiddleware
from .error_handlers import setup_exception_handlers

__all__ = ["CorrelationMiddleware", "setup_exception_handlers"]
