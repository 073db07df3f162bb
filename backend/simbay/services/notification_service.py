# backend/simbay/services/notification_service.py
"""
Notification Service for SimBay

Sends booking confirmations and membership inquiry notices. Delivery is
best effort: every failure is logged and reported as ``False`` so that a
flaky mail provider never fails the request that triggered it.

Payloads are plain values captured at request time because sends run
from FastAPI background tasks after the request session has closed.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Dict, Optional

from ..core.config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics
from .email import EmailSender, build_email_sender
from .template_service import TemplateService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingConfirmation:
    recipient_email: str
    recipient_name: Optional[str]
    simulator: str
    start_time: datetime
    end_time: datetime
    booked_by_name: Optional[str] = None


@dataclass(frozen=True)
class MembershipInquiryNotice:
    name: str
    email: str
    phone: Optional[str]
    message: str
    submitted_at: datetime


class NotificationService:
    """Renders notification templates and hands them to the email sender."""

    def __init__(
        self,
        email_sender: Optional[EmailSender] = None,
        template_service: Optional[TemplateService] = None,
    ):
        self.email_sender = email_sender or build_email_sender()
        self.template_service = template_service or TemplateService()
        self.logger = logging.getLogger(self.__class__.__name__)

    def send_booking_confirmation(self, payload: BookingConfirmation) -> bool:
        subject = (
            f"Booking confirmed: {payload.simulator.title()} simulator on "
            f"{self._format_day(payload.start_time)}"
        )
        return self._deliver(
            "booking_confirmation",
            to_email=payload.recipient_email,
            subject=subject,
            context={
                "user_name": payload.recipient_name,
                "simulator": payload.simulator,
                "start_time": payload.start_time,
                "end_time": payload.end_time,
                "booked_by_name": payload.booked_by_name,
            },
        )

    def send_membership_inquiry_notice(self, payload: MembershipInquiryNotice) -> bool:
        recipient = settings.admin_notification_email
        if not recipient:
            self.logger.info("No admin notification address configured; inquiry notice skipped")
            return False
        return self._deliver(
            "membership_inquiry",
            to_email=recipient,
            subject=f"New membership inquiry from {payload.name}",
            context={
                "name": payload.name,
                "email": payload.email,
                "phone": payload.phone,
                "message": payload.message,
                "submitted_at": payload.submitted_at,
            },
        )

    def _deliver(self, template: str, to_email: str, subject: str, context: Dict[str, Any]) -> bool:
        try:
            html = self.template_service.render_template(f"email/{template}.html", context)
            self.email_sender.send_email(to_email=to_email, subject=subject, html_content=html)
        except Exception:
            # Delivery must never fail the caller
            self.logger.exception("Failed to send %s notification to %s", template, to_email)
            prometheus_metrics.record_notification(template, "failed")
            return False
        prometheus_metrics.record_notification(template, "sent")
        return True

    def _format_day(self, value: datetime) -> str:
        format_date = self.template_service.env.filters["format_date"]
        return str(format_date(value, "%b %d"))
