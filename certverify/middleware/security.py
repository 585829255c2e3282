from __future__ import annotations

from collections.abc import Callable
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


def _is_secure_request(request: Request) -> bool:
    # Honor reverse proxy headers if present
    xf_proto = request.headers.get("x-forwarded-proto")
    if xf_proto:
        return "https" in xf_proto
    return request.url.scheme == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Sets a hardened set of security headers on every response.
    - HTTPS-aware HSTS
    - Strict CSP (all assets are self-hosted)
    - Token-bearing paths are never cached and never sent as a referrer
    """

    def __init__(
        self,
        app,
        *,
        csp_directives: Iterable[str] | None = None,
        sensitive_path_prefixes: Iterable[str] = ("/verify",),
        hsts: str = "max-age=63072000; includeSubDomains; preload",
        referrer_policy: str = "strict-origin-when-cross-origin",
        permissions_policy: str = "geolocation=(), microphone=(), camera=()",
        enable_hsts_on_http: bool = False,
        skip_hsts_hosts: set[str] | None = None,
        frame_options: str = "DENY",
    ) -> None:
        super().__init__(app)
        self.sensitive_path_prefixes = tuple(sensitive_path_prefixes)
        self.hsts = hsts
        self.referrer_policy = referrer_policy
        self.permissions_policy = permissions_policy
        self.enable_hsts_on_http = enable_hsts_on_http
        self.skip_hsts_hosts = skip_hsts_hosts or {"localhost", "127.0.0.1"}
        self.frame_options = frame_options
        self.csp_directives = list(
            csp_directives
            or [
                "default-src 'self'",
                "base-uri 'none'",
                "frame-ancestors 'none'",
                "img-src 'self' data:",
                "font-src 'self'",
                "connect-src 'self'",
                "script-src 'self'",
                "style-src 'self'",
                "form-action 'self'",
                "upgrade-insecure-requests",
            ]
        )

    def _is_sensitive(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.sensitive_path_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers.setdefault(
            "Content-Security-Policy", "; ".join(self.csp_directives)
        )

        # HSTS: only on HTTPS and non-dev hosts unless explicitly enabled
        if _is_secure_request(request) or self.enable_hsts_on_http:
            if request.url.hostname not in self.skip_hsts_hosts:
                response.headers.setdefault("Strict-Transport-Security", self.hsts)

        if self._is_sensitive(request.url.path):
            # The token travels in the query string.
            response.headers["Cache-Control"] = "no-store"
            response.headers["Referrer-Policy"] = "no-referrer"
        else:
            response.headers.setdefault("Referrer-Policy", self.referrer_policy)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", self.frame_options)
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        if self.permissions_policy:
            response.headers.setdefault("Permissions-Policy", self.permissions_policy)
        response.headers.setdefault("X-Permitted-Cross-Domain-Policies", "none")
        return response
