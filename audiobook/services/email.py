"""Email service for welcome and password reset messages."""

import logging
import smtplib
from email.message import EmailMessage

from audiobook.config import get_settings

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional email over SMTP.

    Delivery is disabled when ``SMTP_HOST`` is not configured. Send failures
    are logged and reported through the return value, never raised.
    """

    def __init__(self) -> None:
        self.settings = get_settings()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.smtp_host)

    def _send(self, to: str, subject: str, body: str) -> bool:
        if not self.enabled:
            logger.info(f"SMTP not configured, skipping email '{subject}' to {to}")
            return False

        message = EmailMessage()
        message["From"] = self.settings.email_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as smtp:
                if self.settings.smtp_use_tls:
                    smtp.starttls()
                if self.settings.smtp_username and self.settings.smtp_password:
                    smtp.login(self.settings.smtp_username, self.settings.smtp_password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {e}")
            return False

        logger.info(f"Sent email '{subject}' to {to}")
        return True

    def send_welcome_email(self, email: str, name: str) -> bool:
        """Send the post-signup welcome message."""
        dashboard_url = f"{self.settings.frontend_url}/dashboard"
        body = (
            f"Welcome to Audiobooks, {name}!\n\n"
            "Thank you for joining. Your library, listening progress and\n"
            "recommendations are waiting on your dashboard:\n\n"
            f"{dashboard_url}\n"
        )
        return self._send(email, "Welcome to Audiobooks!", body)

    def send_password_reset_email(self, email: str, reset_token: str) -> bool:
        """Send a link carrying the raw reset token."""
        reset_url = f"{self.settings.frontend_url}/reset-password?token={reset_token}"
        minutes = self.settings.reset_token_expire_minutes
        body = (
            "You requested to reset your Audiobooks password.\n\n"
            f"Open this link to choose a new password (expires in {minutes} minutes):\n"
            f"{reset_url}\n\n"
            "If you didn't request this, please ignore this email.\n"
        )
        return self._send(email, "Password Reset Request", body)
