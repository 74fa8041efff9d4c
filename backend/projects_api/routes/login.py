"""
Projects API — Login Route Handlers
=====================================

What:  POST /api/login/request-otp and POST /api/login/verify-otp.
How:   Parse the body, delegate to auth_service, wrap the result in the envelope.
Who:   Called by the frontend login screen.
"""

import logging

from fastapi import APIRouter, Depends

from projects_api.schemas.auth import LoginResult, OtpRequest, OtpRequestResult, OtpVerifyRequest
from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.services.auth_service import auth_service
from projects_api.services.procedures import ProcedureClient, get_procedures

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/login", tags=["Login"])


@router.post(
    "/request-otp",
    response_model=Envelope[OtpRequestResult],
    responses={
        400: {"description": "Email missing", "model": ErrorResponse},
        404: {"description": "Unknown or inactive account", "model": ErrorResponse},
        500: {"description": "Database or email failure", "model": ErrorResponse},
    },
    summary="Send a one-time password",
    description=(
        "Checks that the email belongs to an active account, stores a fresh OTP and "
        "emails it. The returned loginCode must accompany the verification call."
    ),
)
async def request_otp(
    body: OtpRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[OtpRequestResult]:
    result = await auth_service.request_otp(procedures, body.email_id)
    return Envelope(
        message="OTP has been sent successfully to your registered email ID",
        data=result,
    )


@router.post(
    "/verify-otp",
    response_model=Envelope[LoginResult],
    responses={
        400: {"description": "Missing field or nil login code", "model": ErrorResponse},
        404: {"description": "OTP wrong or expired", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Verify the OTP and log in",
)
async def verify_otp(
    body: OtpVerifyRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[LoginResult]:
    """Returns the user, their role and a bearer token valid for JWT_EXPIRY_HOURS."""
    result = await auth_service.verify_otp(procedures, body.email_id, body.login_code, body.otp)
    return Envelope(message="Login successful", data=result)
