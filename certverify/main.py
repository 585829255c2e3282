"""
FastAPI Application - Certificate QR Verification
"""

from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from certverify.config import settings
from certverify.database import Base, engine, get_db
from certverify.middleware.security import SecurityHeadersMiddleware
from certverify.models.certificate import Certificate  # noqa: F401 - metadata
from certverify.observability.logging import configure_logging
from certverify.observability.metrics import MetricsMiddleware, metrics_response
from certverify.routers.ui import router as ui_router
from certverify.routers.verify import router as verify_router
from certverify.security import limiter
from certverify.staticfiles import CachedStaticFiles, templates

logger = logging.getLogger(__name__)


# ==========================================
# Database Initialization
# ==========================================
def init_database() -> None:
    Base.metadata.create_all(bind=engine)


# ==========================================
# Application Lifespan
# ==========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting certificate verification service")
    init_database()
    yield
    logger.info("Shutting down certificate verification service")


configure_logging(settings.log_level.upper())
IS_PROD = settings.is_production


# ==========================================
# Exception handlers
# ==========================================
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    accepts_html = "text/html" in request.headers.get("accept", "").lower()
    payload = {"detail": "Rate limit exceeded. Please retry shortly."}
    if accepts_html:
        return HTMLResponse(
            "<h2>Too Many Requests</h2><p>Please retry shortly.</p>",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        )
    return JSONResponse(payload, status_code=status.HTTP_429_TOO_MANY_REQUESTS)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Render HTML error pages for browsers and JSON for everything else."""
    accepts_html = "text/html" in request.headers.get("accept", "").lower()

    if exc.status_code == 404 and accepts_html:
        return templates.TemplateResponse(
            request,
            "404.html",
            status_code=status.HTTP_404_NOT_FOUND,
        )

    if exc.status_code == 503 and accepts_html:
        return templates.TemplateResponse(
            request,
            "503.html",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return JSONResponse(
        {"detail": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


# ==========================================
# FastAPI Application
# ==========================================
app = FastAPI(
    title="Certificate Verification",
    description="QR code certificate verification",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=None if IS_PROD else "/docs",
    redoc_url=None if IS_PROD else "/redoc",
    openapi_url=None if IS_PROD else "/openapi.json",
)
# Order: compression → rate-limit/metrics → security → correlation id
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(
    SecurityHeadersMiddleware,
    referrer_policy="strict-origin-when-cross-origin",
    permissions_policy="geolocation=(), microphone=(), camera=()",
)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["Accept"],
    )
app.mount("/static", CachedStaticFiles(), name="static")


# ==========================================
# Health & readiness (minimal in prod)
# ==========================================
@app.get("/healthz", tags=["system"], summary="Health check", response_model=dict)
def health_check() -> dict:
    if IS_PROD:
        return {"status": "healthy"}
    return {"status": "healthy", "version": app.version}


@app.get("/readyz", tags=["system"], summary="Readiness check", response_model=dict)
def readiness_check(db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Readiness check failed: %s", type(exc).__name__)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="unavailable"
        ) from exc
    if IS_PROD:
        return {"status": "ready"}
    return {"status": "ready", "database": "connected"}


# ==========================================
# Metrics (Protected with HTTP Basic Auth)
# ==========================================
security = HTTPBasic(auto_error=False)


def verify_metrics_auth(
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> str:
    """Verify HTTP Basic Auth credentials for the metrics endpoint."""
    if not settings.metrics_password:
        return credentials.username if credentials else "anonymous"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(
        credentials.username, settings.metrics_username
    )
    correct_password = secrets.compare_digest(
        credentials.password, settings.metrics_password
    )

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


@app.get("/metrics", include_in_schema=False)
def metrics(_: str = Depends(verify_metrics_auth)):
    """
    Prometheus metrics endpoint.

    Set METRICS_USERNAME and METRICS_PASSWORD to require HTTP Basic Auth.
    """
    return metrics_response()


# ==========================================
# Routers
# ==========================================
app.include_router(ui_router)
app.include_router(verify_router)
