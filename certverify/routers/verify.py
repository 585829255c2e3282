import asyncio

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.config import settings
from certverify.database_async import get_async_session
from certverify.security import limiter
from certverify.services.certificate_store import (
    CertificateStore,
    SQLAlchemyCertificateStore,
)
from certverify.services.display import format_verified_on
from certverify.services.verification import (
    InvalidRequest,
    Pending,
    Unverified,
    VerificationAttempt,
    VerificationRequest,
    VerificationState,
    Verified,
)
from certverify.staticfiles import templates

router = APIRouter(tags=["verification"])

STATE_STATUS_CODES: dict[type, int] = {
    Pending: status.HTTP_202_ACCEPTED,
    InvalidRequest: status.HTTP_400_BAD_REQUEST,
    Unverified: status.HTTP_404_NOT_FOUND,
    Verified: status.HTTP_200_OK,
}


def get_certificate_store(
    session: AsyncSession = Depends(get_async_session),
) -> CertificateStore:
    return SQLAlchemyCertificateStore(session)


def view_context(state: VerificationState) -> dict:
    """Template context for one of the three view states."""
    if isinstance(state, Verified):
        return {
            "view": "success",
            "certificate": state.certificate,
            "verified_on": format_verified_on(),
        }
    if isinstance(state, InvalidRequest | Unverified):
        return {"view": "failure", "message": state.message}
    return {"view": "loading"}


def render_state(request: Request, state: VerificationState) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "verify.html",
        view_context(state),
        status_code=STATE_STATUS_CODES[type(state)],
    )


async def _run_attempt(
    store: CertificateStore, verification_request: VerificationRequest
) -> VerificationState:
    attempt = VerificationAttempt(store, verification_request)
    try:
        return await attempt.run()
    except asyncio.CancelledError:
        # Client went away; drop whatever the lookup returns.
        attempt.cancel()
        raise


@router.get("/verify", response_class=HTMLResponse, include_in_schema=False)
@router.get("/verify/", response_class=HTMLResponse, include_in_schema=False)
@limiter.limit(settings.verify_rate_limit)
async def verify_missing_id(
    request: Request,
    store: CertificateStore = Depends(get_certificate_store),
):
    verification_request = VerificationRequest.from_params(
        None, request.query_params.get("token")
    )
    state = await _run_attempt(store, verification_request)
    return render_state(request, state)


@router.get("/verify/{qr_code_id}", response_class=HTMLResponse)
@limiter.limit(settings.verify_rate_limit)
async def verify_certificate_page(
    qr_code_id: str,
    request: Request,
    token: str | None = Query(default=None),
    store: CertificateStore = Depends(get_certificate_store),
):
    """Render the verification page for a scanned QR link."""
    verification_request = VerificationRequest.from_params(qr_code_id, token)
    state = await _run_attempt(store, verification_request)
    return render_state(request, state)
