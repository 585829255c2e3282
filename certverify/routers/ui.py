from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse

from certverify.config import settings
from certverify.security import limiter
from certverify.staticfiles import templates

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
@limiter.limit("60/minute")
def home(request: Request):
    accept_header = request.headers.get("accept", "")
    if "text/html" in accept_header.lower():
        return templates.TemplateResponse(request, "home.html")
    verify_link = settings.base_url.rstrip("/") + "/verify/{qr_code_id}?token={token}"
    return JSONResponse(
        {
            "message": "Certificate Verification",
            "verify": verify_link,
        }
    )
