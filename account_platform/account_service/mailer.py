"""
Mail delivery for password reset codes.

Two backends share the `send` interface: SmtpMailer delivers through the
`emails` library, ConsoleMailer only logs the message (local development).
Both raise MailDeliveryError when delivery fails.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import emails

from .config import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    pass


class Mailer(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        """Deliver one message, raising MailDeliveryError on failure."""

    def close(self) -> None:
        """Release transport resources. Called on application shutdown."""


class ConsoleMailer(Mailer):
    """Dev backend: logs the message instead of sending it."""

    def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        logger.info("[DEV] Email to %s: %s\n%s", to, subject, text)


class SmtpMailer(Mailer):
    def __init__(self, settings: Settings):
        self.sender = settings.EMAIL_SENDER
        self.smtp_options = {
            "host": settings.SMTP_HOST,
            "port": settings.SMTP_PORT,
            "timeout": settings.EMAIL_TIMEOUT_SECONDS,
            "tls": settings.SMTP_TLS,
            "user": settings.EMAIL_SENDER,
            "password": settings.EMAIL_APP_PASSWORD,
        }

    def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        message = emails.Message(subject=subject, text=text, html=html, mail_from=self.sender)
        try:
            response = message.send(to=to, smtp=self.smtp_options)
        except Exception as exc:
            raise MailDeliveryError(f"Failed to send email to {to}: {exc}") from exc

        if response is None or response.status_code != 250:
            status_code = getattr(response, "status_code", None)
            raise MailDeliveryError(f"SMTP server rejected message to {to} (status={status_code})")
        logger.info("Email sent to %s", to)


def create_mailer(settings: Settings) -> Mailer:
    if settings.MAIL_BACKEND == "smtp":
        return SmtpMailer(settings)
    return ConsoleMailer()


def password_reset_message(reset_token: str, reset_url: str, expire_minutes: int) -> tuple:
    """Build (subject, text, html) for a password reset email."""
    subject = f"Your password reset token (valid for {expire_minutes} min)"
    text = (
        f"Forgot your password? Your reset code is: {reset_token}\n\n"
        f"Submit a PATCH request with your new password and passwordConfirm to: {reset_url}\n\n"
        "If you didn't forget your password, please ignore this email."
    )
    html = (
        "<p>Forgot your password? Your reset code is:</p>"
        f"<p><strong>{reset_token}</strong></p>"
        f"<p>Submit a PATCH request with your new password and passwordConfirm to:<br><code>{reset_url}</code></p>"
        f"<p>This code expires in {expire_minutes} minutes. "
        "If you didn't forget your password, please ignore this email.</p>"
    )
    return subject, text, html
