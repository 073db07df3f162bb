# backend/simbay/services/email.py
"""
Email senders for SimBay.

``EmailService`` delivers through the Resend API. ``ConsoleEmailService``
logs instead of sending and is selected when EMAIL_PROVIDER=console.
Both raise ServiceException on failure; deciding whether a failure
matters is the caller's job.
"""

import logging
import re
from typing import Any, Dict, Optional, Protocol

import resend

from ..core.config import settings
from ..core.exceptions import ServiceException

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]: ...


def html_to_text(html_content: str) -> str:
    """Convert HTML content to plain text for better deliverability"""
    text = re.sub(r"<[^>]+>", "", html_content)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


class EmailService:
    """Service for sending emails using Resend API."""

    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None):
        api_key = api_key or settings.resend_api_key
        if not api_key:
            raise ServiceException("Resend API key not configured")

        resend.api_key = api_key
        self.from_email = from_email or settings.from_email
        self.logger = logging.getLogger(self.__class__.__name__)

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send a generic email using Resend.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            text_content: Optional plain text version

        Returns:
            Dict containing the Resend API response

        Raises:
            ServiceException: If email sending fails
        """
        email_data = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content or html_to_text(html_content),
        }
        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            self.logger.error(f"Failed to send email to {to_email}: {type(e).__name__}: {e}")
            raise ServiceException(f"Failed to send email: {str(e)}") from e

        self.logger.info(f"Email sent successfully to {to_email} - Subject: {subject}")
        return dict(response) if response else {}


class ConsoleEmailService:
    """Email sender that logs instead of delivering. Used in development and tests."""

    def __init__(self, from_email: Optional[str] = None) -> None:
        self.from_email = from_email or settings.from_email
        self.logger = logging.getLogger(self.__class__.__name__)

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.logger.info(
            "Console email to %s - Subject: %s\n%s",
            to_email,
            subject,
            text_content or html_to_text(html_content),
        )
        return {"id": "console", "to": to_email}


def build_email_sender() -> EmailSender:
    """Pick the configured email provider."""
    if settings.email_provider == "resend":
        return EmailService()
    return ConsoleEmailService()
