"""
Projects API — OTP Email Service
==================================

What:  Renders and sends the one-time-password email of the login flow.
How:   Reads the HTML template with aiofiles, substitutes {{otp}}, and sends
       it over SMTP (smtplib in a worker thread) with tenacity retries.
Who:   auth_service.request_otp().
When:  Once per OTP request, before the response is returned.

Retry policy:
    Transient failures only: dropped connections, refused connects, socket
    timeouts. Authentication errors and refused recipients fail at once.
    Exponential backoff with jitter between SMTP_RETRY_MIN_WAIT and
    SMTP_RETRY_MAX_WAIT, at most SMTP_RETRY_ATTEMPTS attempts.

Template:
    OTP_TEMPLATE_PATH, or templates/otp_email.html inside this package.
    A built-in body is used when the file is missing.
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from pathlib import Path
from typing import Optional

import aiofiles
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from projects_api.config import settings
from projects_api.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = Path(__file__).resolve().parent.parent / "templates" / "otp_email.html"
OTP_PLACEHOLDER = "{{otp}}"
OTP_SUBJECT = "Your OTP for ZiCORP Login"

TRANSIENT_SMTP_ERRORS = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    ConnectionError,
    TimeoutError,
)

FALLBACK_OTP_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>ZiCORP - Secure Login Verification</title>
</head>
<body style="margin: 0; padding: 40px 0; font-family: Arial, sans-serif; background-color: #f8f9fa;">
    <div style="max-width: 600px; margin: 0 auto; background: #ffffff; border-radius: 12px; overflow: hidden;">
        <div style="background: #1e40af; padding: 32px; text-align: center; color: #ffffff;">
            <h1 style="margin: 0;">ZiCORP</h1>
            <p style="margin: 8px 0 0 0;">Secure Login Verification</p>
        </div>
        <div style="padding: 40px; text-align: center;">
            <h2 style="margin: 0 0 20px 0; color: #1f2937;">Your Verification Code</h2>
            <p style="color: #6b7280;">Please use the following One-Time Password (OTP) to complete your login:</p>
            <div style="font-size: 42px; font-weight: 700; color: #0369a1; letter-spacing: 8px; font-family: 'Courier New', monospace; margin: 30px 0;">{{otp}}</div>
            <p style="color: #92400e; font-size: 14px;"><strong>Security Notice:</strong> This OTP is valid for 10 minutes and can only be used once. Never share this code with anyone.</p>
            <p style="color: #6b7280; font-size: 14px;">If you didn't request this code, please ignore this email or contact our support team.</p>
        </div>
        <div style="background: #f8fafc; padding: 24px; text-align: center; color: #9ca3af; font-size: 12px;">
            <strong style="color: #374151;">ZiCORP Solutions Team</strong><br>
            This is an automated message. Please do not reply to this email.
        </div>
    </div>
</body>
</html>
"""


class EmailService:
    """
    SMTP delivery for OTP emails.

    Stateless apart from an optional template override; a singleton is shared
    by all requests.
    """

    def __init__(self, template_path: Optional[str] = None):
        self._template_path = template_path

    @property
    def template_path(self) -> Path:
        configured = self._template_path or settings.otp_template_path
        return Path(configured) if configured else DEFAULT_TEMPLATE

    async def render_otp(self, otp: str) -> str:
        """Return the HTML body with the OTP filled in."""
        path = self.template_path
        if path.is_file():
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                template = await f.read()
        else:
            logger.warning("OTP email template not found at %s. Using fallback.", path)
            template = FALLBACK_OTP_HTML
        return template.replace(OTP_PLACEHOLDER, otp)

    def build_message(self, recipient: str, subject: str, html_body: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((settings.smtp_sender_name, settings.smtp_sender_email.strip()))
        message["To"] = recipient
        message.set_content("Your one-time password is in the HTML part of this email.")
        message.add_alternative(html_body, subtype="html")
        return message

    async def send_otp(self, recipient: str, otp: str) -> None:
        """
        Render and send the OTP email.

        Raises:
            EmailDeliveryError: SMTP failed after all retries, or failed with
                a non-transient error (→ 500).
        """
        logger.info("Sending OTP email to: %s", recipient)
        html_body = await self.render_otp(otp)
        message = self.build_message(recipient, OTP_SUBJECT, html_body)

        try:
            await self._send_with_retry(message)
        except RetryError as e:
            cause = e.last_attempt.exception() if e.last_attempt else None
            logger.error("All SMTP retries exhausted for %s: %s", recipient, str(cause))
            raise EmailDeliveryError(
                context={"recipient": recipient, "attempts": settings.smtp_retry_attempts}
            )
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send OTP email to %s: %s", recipient, str(e))
            raise EmailDeliveryError(
                context={"recipient": recipient, "error_type": type(e).__name__, "error": str(e)}
            )

        logger.info("OTP email successfully sent to %s", recipient)

    @retry(
        retry=retry_if_exception_type(TRANSIENT_SMTP_ERRORS),
        stop=stop_after_attempt(settings.smtp_retry_attempts),
        wait=wait_exponential_jitter(
            initial=settings.smtp_retry_min_wait,
            max=settings.smtp_retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    async def _send_with_retry(self, message: EmailMessage) -> None:
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._deliver, message)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if settings.smtp_password:
                smtp.login(
                    settings.smtp_username or settings.smtp_sender_email.strip(),
                    settings.smtp_password,
                )
            smtp.send_message(message)


# ── Singleton Instance ────────────────────────────────────────────────────
email_service = EmailService()
