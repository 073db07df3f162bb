"""Email address normalization shared by member accounts and inquiries."""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from ..core.exceptions import ValidationException


def normalize_email(email: str | None, message: str = "Please enter a valid email address") -> str:
    """Syntax-check ``email`` and return it lowercased. No DNS lookup is made."""
    raw = (email or "").strip()
    try:
        result = validate_email(raw, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationException(message, details={"email": raw, "reason": str(exc)}) from exc
    return result.normalized.lower()
