"""Email one-time passcodes that unlock the full estimate for a client."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from estimator.api.dependencies.services import get_app_settings, get_mailer
from estimator.api.errors import http_errors
from estimator.api.schemas.schemas import OtpSendRequest, OtpVerifyRequest
from estimator.config.settings import Settings
from estimator.db.session import get_database
from estimator.otp.mailer import SmtpMailer
from estimator.otp.service import issue_code, verify_code

router = APIRouter(prefix="/api/otp", tags=["otp"])


@router.post("/send")
def send_otp(
    body: OtpSendRequest,
    request: Request,
    mailer: SmtpMailer = Depends(get_mailer),
    app_settings: Settings = Depends(get_app_settings),
):
    """Issue a code and email it.

    The code is committed before sending so a slow relay never holds a
    database transaction open.
    """
    if not body.email or not body.email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    ttl = app_settings.otp_ttl_minutes
    with get_database(request).session() as session:
        record = issue_code(session, body.email, ttl)
        email, code = record.email, record.code

    with http_errors():
        mailer.send_otp(email, code, ttl)
    return {"success": True, "message": "OTP sent successfully"}


@router.post("/verify")
def verify_otp(body: OtpVerifyRequest, request: Request):
    if not body.email or not body.code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and code are required")

    with get_database(request).session() as session:
        verified = verify_code(session, body.email, body.code)

    if not verified:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired OTP")
    return {"success": True, "message": "OTP verified successfully"}
