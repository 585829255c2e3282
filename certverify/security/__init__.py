"""Security façade for rate limiting and headers middleware."""

from certverify.middleware.security import SecurityHeadersMiddleware  # noqa: F401

from .rate_limit import limiter  # noqa: F401

__all__ = [
    "limiter",
    "SecurityHeadersMiddleware",
]
