"""Service for sending password reset emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
from urllib.parse import quote

from fastapi import Depends

from poolrent.config import Settings, get_settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        reset_url: str,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "Pool Rental",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or ""
        self.from_name = from_name
        self.reset_url = reset_url
        self.enabled = bool(self.smtp_host and self.from_email)

    def build_reset_link(self, token: str) -> str:
        return f"{self.reset_url}?token={quote(token)}"

    def send_password_reset_email(self, to_email: str, token: str) -> None:
        """
        Send the password reset link.

        Raises whatever smtplib raises; callers running this in the
        background are expected to log and drop failures.
        """
        reset_link = self.build_reset_link(token)

        if not self.enabled:
            logger.warning(f"SMTP is not configured, reset email to {to_email} not sent")
            logger.debug(f"Reset link for {to_email}: {reset_link}")
            return

        subject = "Reset your password - Pool Rental"

        text_body = "\n".join([
            "A password reset was requested for your Pool Rental account.",
            "",
            "To choose a new password, open the following link:",
            reset_link,
            "",
            "If you did not request this change, you can ignore this email.",
        ])

        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <p style="font-size: 12px; font-weight: 600; color: #9ca3af; text-transform: uppercase;">
                    Pool Rental
                </p>
                <h1 style="font-size: 20px; color: #0f172a;">Reset your password</h1>
                <p style="font-size: 14px; line-height: 1.6; color: #4b5563;">
                    A password reset was requested for your <strong>Pool Rental</strong> account.
                </p>
                <p style="padding: 10px 0 18px;">
                    <a href="{reset_link}"
                       style="display: inline-block; padding: 10px 22px; border-radius: 999px;
                              background: #0ea5e9; color: #ffffff; font-size: 13px;
                              font-weight: 700; text-decoration: none;">
                        Change password
                    </a>
                </p>
                <p style="font-size: 12px; color: #6b7280;">
                    If the button does not work, paste this address into your browser:<br>
                    <a href="{reset_link}" style="color: #0ea5e9;">{reset_link}</a>
                </p>
                <p style="font-size: 11px; color: #9ca3af; border-top: 1px solid #e5e7eb; padding-top: 16px;">
                    If you did not request this change, you can ignore this email.
                </p>
            </body>
        </html>
        """

        self._send_email(to_email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        if self.smtp_port == 465:
            server = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=30)
        else:
            server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30)
            server.starttls()

        with server:
            if self.smtp_username:
                server.login(self.smtp_username, self.smtp_password)
            server.sendmail(self.from_email, [to_email], msg.as_string())

        logger.info(f"Password reset email sent to {to_email}")


def deliver_password_reset(email_service: EmailService, to_email: str, token: str) -> None:
    """Background task body: send the reset email, log on failure."""
    try:
        email_service.send_password_reset_email(to_email, token)
    except Exception:
        logger.exception(f"Failed to send reset password email to {to_email}")


def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService(
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        reset_url=settings.reset_password_url,
        smtp_username=settings.SMTP_USER,
        smtp_password=settings.SMTP_PASSWORD,
        from_email=settings.SMTP_FROM,
    )
