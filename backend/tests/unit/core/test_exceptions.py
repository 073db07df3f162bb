# backend/tests/unit/core/test_exceptions.py
import pytest

from simbay.core.exceptions import (
    BookingConflictException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    QuotaExceededException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
)


@pytest.mark.parametrize(
    "exc,status,code",
    [
        (ValidationException("bad"), 400, "VALIDATION_ERROR"),
        (UnauthorizedException("who"), 401, "UNAUTHENTICATED"),
        (ForbiddenException("no"), 403, "PERMISSION_DENIED"),
        (NotFoundException("gone"), 404, "NOT_FOUND"),
        (ConflictException("clash"), 409, "CONFLICT"),
        (ServiceException("down"), 502, "DEPENDENCY_FAILURE"),
        (BookingConflictException(), 409, "SLOT_CONFLICT"),
        (QuotaExceededException("user-1"), 409, "QUOTA_EXCEEDED"),
    ],
)
def test_http_mapping(exc, status, code):
    http_exc = exc.to_http_exception()

    assert http_exc.status_code == status
    assert http_exc.detail["code"] == code
    assert http_exc.detail["message"] == exc.message


def test_unauthorized_sets_bearer_challenge():
    assert UnauthorizedException("x").to_http_exception().headers == {"WWW-Authenticate": "Bearer"}


def test_quota_details_carry_existing_booking():
    exc = QuotaExceededException("user-1", existing_booking_id=7)

    assert exc.details == {"user_id": "user-1", "existing_booking_id": 7}
