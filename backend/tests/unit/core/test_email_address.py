# backend/tests/unit/core/test_email_address.py
import pytest

from simbay.core.exceptions import ValidationException
from simbay.utils.email_address import normalize_email


def test_trims_and_lowercases():
    assert normalize_email("  Casey.Chip@Example.COM ") == "casey.chip@example.com"


@pytest.mark.parametrize(
    "email", [None, "", "casey@", "casey@example", "a@b@example.com", "x y@example.com"]
)
def test_rejects_malformed_addresses(email):
    with pytest.raises(ValidationException) as exc_info:
        normalize_email(email)

    assert exc_info.value.code == "VALIDATION_ERROR"
    assert exc_info.value.details["email"] == (email or "").strip()


def test_custom_message():
    with pytest.raises(ValidationException, match="A valid email address is required"):
        normalize_email("nope", "A valid email address is required")
