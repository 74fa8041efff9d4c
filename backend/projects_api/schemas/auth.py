"""
Projects API — OTP Login Schemas
==================================

What:  Request/response shapes for the two-step OTP login.

Flow:
    1. POST /api/login/request-otp  {emailId}                  → {loginCode}
    2. POST /api/login/verify-otp   {emailId, loginCode, otp}  → user + token
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from projects_api.schemas.common import CamelModel


class OtpRequest(CamelModel):
    email_id: Optional[str] = Field(default=None, description="Registered email address")


class OtpRequestResult(CamelModel):
    login_code: Optional[UUID] = Field(
        default=None, description="Correlates the OTP with the verification call"
    )


class OtpVerifyRequest(CamelModel):
    email_id: Optional[str] = None
    login_code: Optional[UUID] = None
    otp: Optional[str] = None


class LoginResult(CamelModel):
    user_id: Optional[UUID] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role_id: Optional[UUID] = None
    role: Optional[str] = None
    token: str = Field(description="HS256 bearer token")
    expiry_time: datetime = Field(description="Token expiry (UTC)")
