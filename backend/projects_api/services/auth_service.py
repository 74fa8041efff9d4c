"""
Projects API — OTP Login Service
==================================

What:  Two-step email OTP login.
How:
    request_otp:  sp_CheckEmailAndGenerateOtp checks the address and stores a
                  fresh OTP; the OTP is emailed and a login code returned.
    verify_otp:   sp_VerifyOtpAndGetUser matches (email, login code, OTP);
                  on success a signed token is issued for the user.
Who:   routes/login.py.

Ordering:
    The OTP email is sent inside the request. If delivery fails the request
    fails, its transaction is rolled back and the OTP is never stored.
"""

import logging
import uuid
from typing import Optional

from projects_api.exceptions import InfrastructureError, NotFoundError, ValidationError
from projects_api.schemas.auth import LoginResult, OtpRequestResult
from projects_api.services.email_service import email_service
from projects_api.services.procedures import ProcedureClient
from projects_api.services.result_tree import first_row
from projects_api.services.token_service import token_service

logger = logging.getLogger(__name__)

CHECK_EMAIL_AND_GENERATE_OTP = "sp_CheckEmailAndGenerateOtp"
VERIFY_OTP = "sp_VerifyOtpAndGetUser"

EMAIL_NOT_FOUND = "Email ID not found or account is inactive"
INVALID_OTP = "Invalid OTP or expired."


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthService:

    async def request_otp(self, procedures: ProcedureClient, email_id: Optional[str]) -> OtpRequestResult:
        """
        Generate and email an OTP.

        Raises:
            ValidationError: email missing (→ 400)
            NotFoundError: unknown or inactive account (→ 404)
            EmailDeliveryError: SMTP failed (→ 500)
        """
        if _blank(email_id):
            raise ValidationError(message="EmailId is required.", field="emailId")
        email_id = email_id.strip()

        result_sets = await procedures.call(CHECK_EMAIL_AND_GENERATE_OTP, {"EmailId": email_id})
        row = first_row(result_sets, 0, CHECK_EMAIL_AND_GENERATE_OTP)
        if not row or row.get("status_code") != 1:
            raise NotFoundError(resource="account", message=EMAIL_NOT_FOUND)

        otp = row.get("otp")
        if otp is None:
            raise InfrastructureError(
                source="Controller",
                context={"procedure": CHECK_EMAIL_AND_GENERATE_OTP, "detail": "OTP is null"},
            )

        await email_service.send_otp(email_id, str(otp))
        return OtpRequestResult(login_code=row.get("code"))

    async def verify_otp(
        self,
        procedures: ProcedureClient,
        email_id: Optional[str],
        login_code: Optional[uuid.UUID],
        otp: Optional[str],
    ) -> LoginResult:
        """
        Verify the OTP and issue a token.

        Raises:
            ValidationError: a field is missing or the login code is the nil UUID (→ 400)
            NotFoundError: OTP wrong, expired or already used (→ 404)
            InfrastructureError: token settings missing (→ 500)
        """
        if _blank(email_id) or _blank(otp) or login_code is None or login_code == uuid.UUID(int=0):
            raise ValidationError(message="Invalid input.")

        result_sets = await procedures.call(
            VERIFY_OTP,
            {"EmailId": email_id.strip(), "LoginCode": login_code, "Otp": otp.strip()},
        )
        user = first_row(result_sets, 0, VERIFY_OTP)
        if not user:
            raise NotFoundError(resource="login", message=INVALID_OTP)

        token, expires_at = token_service.issue(user.get("email_id") or email_id.strip())
        logger.info("User %s logged in", user.get("user_id"))
        return LoginResult(
            user_id=user.get("user_id"),
            name=user.get("user_name"),
            email=user.get("email_id"),
            role_id=user.get("role_id"),
            role=user.get("role_name"),
            token=token,
            expiry_time=expires_at,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
