"""Dispatcher middleware package."""

from .rate_limit import setup_rate_limit_middleware, RateLimitMiddleware

__all__ = [
    "setup_rate_limit_middleware",
    "RateLimitMiddleware",
]
