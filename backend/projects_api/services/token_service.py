"""
Projects API — Login Token Service
====================================

What:  Issues the HS256 bearer token returned by a successful OTP verification.
How:   PyJWT signs {sub, iss, aud, iat, exp} with JWT_KEY. Issuer and audience
       are both JWT_ISSUER; the token lives JWT_EXPIRY_HOURS.
Who:   auth_service.verify_otp().

Configuration errors:
    A missing key or issuer is a deployment problem, reported as
    InfrastructureError (500) with source "Controller".
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt

from projects_api.config import settings
from projects_api.exceptions import InfrastructureError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenService:
    """
    Signs and verifies login tokens.

    Settings are read on every call unless overridden in the constructor,
    so a corrected environment takes effect without re-creating the service.
    """

    def __init__(
        self,
        key: Optional[str] = None,
        issuer: Optional[str] = None,
        expiry_hours: Optional[int] = None,
    ):
        self._key = key
        self._issuer = issuer
        self._expiry_hours = expiry_hours

    @property
    def key(self) -> str:
        return self._key if self._key is not None else settings.jwt_key

    @property
    def issuer(self) -> str:
        return self._issuer if self._issuer is not None else settings.jwt_issuer

    @property
    def expiry_hours(self) -> int:
        return self._expiry_hours if self._expiry_hours is not None else settings.jwt_expiry_hours

    def _require_configuration(self) -> None:
        if not self.key or not self.issuer:
            logger.error("JWT configuration is not properly set up (JWT_KEY / JWT_ISSUER)")
            raise InfrastructureError(
                source="Controller",
                context={"reason": "JWT configuration is not properly set up"},
            )

    def issue(self, subject: str, now: Optional[datetime] = None) -> Tuple[str, datetime]:
        """
        Create a signed token for `subject` (the user's email).

        Returns:
            (token, expiry) with expiry as an aware UTC datetime.

        Raises:
            InfrastructureError: JWT_KEY or JWT_ISSUER is not configured.
        """
        self._require_configuration()
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(hours=self.expiry_hours)
        payload = {
            "sub": subject,
            "iss": self.issuer,
            "aud": self.issuer,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.key, algorithm=ALGORITHM)
        return token, expires_at

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature, issuer, audience and expiry.

        Raises:
            jwt.InvalidTokenError: the token is invalid or expired.
        """
        self._require_configuration()
        return jwt.decode(
            token,
            self.key,
            algorithms=[ALGORITHM],
            audience=self.issuer,
            issuer=self.issuer,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService()
