"""Verification email delivery over SMTP.

Every send goes through a circuit breaker so a dead relay fails fast
instead of holding request threads for the SMTP timeout.
"""

from __future__ import annotations

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from loguru import logger

from estimator.config.settings import Settings
from estimator.core.circuit_breaker import CircuitBreaker
from estimator.errors import MailDeliveryError, MailNotConfiguredError


def render_otp_message(sender: str, recipient: str, code: str, ttl_minutes: int) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = "Your Verification Code"
    msg["From"] = sender
    msg["To"] = recipient

    text_body = f"Your verification code is: {code}\n\nThis code will expire in {ttl_minutes} minutes.\n"
    html_body = f"""
<div style="font-family: Arial, sans-serif; padding: 20px; color: #333;">
    <h2 style="color: #0ea5e9;">Verification Code</h2>
    <p>Please use the following code to unlock your estimate:</p>
    <div style="background: #f3f4f6; padding: 15px; border-radius: 8px; font-size: 24px; font-weight: bold; letter-spacing: 5px; text-align: center; margin: 20px 0;">
        {code}
    </div>
    <p style="font-size: 14px; color: #666;">This code will expire in {ttl_minutes} minutes.</p>
</div>
"""
    msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))
    return msg


class SmtpMailer:
    """Send OTP emails through the configured SMTP relay."""

    def __init__(self, settings: Settings, breaker: CircuitBreaker | None = None) -> None:
        self.settings = settings
        self.breaker = breaker or CircuitBreaker(
            "smtp",
            max_failures=settings.mail_breaker_max_failures,
            reset_timeout=settings.mail_breaker_reset_seconds,
        )

    def send_otp(self, recipient: str, code: str, ttl_minutes: int) -> None:
        """Send a verification code.

        Raises:
            MailNotConfiguredError: SMTP settings are incomplete
            CircuitOpenError: Recent sends failed; relay is being skipped
            MailDeliveryError: The relay refused the message or was unreachable
        """
        if not self.settings.smtp_configured:
            logger.error("[OTP] SMTP not configured - cannot send verification email")
            raise MailNotConfiguredError("Email service is not configured")

        msg = render_otp_message(self.settings.smtp_user, recipient, code, ttl_minutes)
        self.breaker.call(lambda: self._deliver(msg))
        logger.info(f"[OTP] Verification email sent to {recipient}")

    def _deliver(self, msg: MIMEMultipart) -> None:
        logger.debug(f"[OTP] Connecting to SMTP server {self.settings.smtp_host}:{self.settings.smtp_port}")
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=15) as server:
                server.starttls()
                server.login(self.settings.smtp_user, self.settings.smtp_password)
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"[OTP] SMTP authentication failed: {e}")
            raise MailDeliveryError("SMTP authentication failed") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[OTP] SMTP error: {e}")
            raise MailDeliveryError("Failed to send verification email") from e
