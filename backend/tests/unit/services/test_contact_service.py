# backend/tests/unit/services/test_contact_service.py
import pytest

from simbay.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from simbay.services.contact_service import ContactService


@pytest.fixture
def service(db):
    return ContactService(db)


def test_submit_snapshots_sender(service, member, member_actor):
    created = service.submit(member_actor, "Equipment", "Projector flicker", "East bay screen flickers")

    assert created.issue_type == "equipment"
    assert created.user_name == member.name
    assert created.user_email == member.email
    assert created.is_read is False
    assert created.is_resolved is False


@pytest.mark.parametrize(
    "issue_type,subject,message",
    [
        ("complaint", "Subject", "Body"),
        ("billing", "   ", "Body"),
        ("billing", "Subject", ""),
        ("billing", "x" * 201, "Body"),
    ],
)
def test_submit_validation(service, member_actor, issue_type, subject, message):
    with pytest.raises(ValidationException):
        service.submit(member_actor, issue_type, subject, message)


def test_admin_inbox_and_review(service, member_actor, admin_actor):
    first = service.submit(member_actor, "billing", "Double charge", "Charged twice")
    second = service.submit(member_actor, "other", "Thanks", "Great place")

    service.update_message(admin_actor, first.id, admin_notes="Refunded", is_resolved=True)

    open_items = service.list_messages(admin_actor, unresolved_only=True)
    assert [m.id for m in open_items] == [second.id]
    assert len(service.list_messages(admin_actor)) == 2


def test_update_keeps_notes_when_omitted(service, member_actor, admin_actor):
    created = service.submit(member_actor, "billing", "Question", "About my fee")
    service.update_message(admin_actor, created.id, admin_notes="Called back")

    updated = service.update_message(admin_actor, created.id, is_read=True)

    assert updated.admin_notes == "Called back"
    assert updated.is_read is True


def test_members_cannot_read_inbox(service, member_actor):
    with pytest.raises(ForbiddenException):
        service.list_messages(member_actor)


def test_delete(service, member_actor, admin_actor):
    created = service.submit(member_actor, "booking", "Wrong slot", "Please move me")

    service.delete_message(admin_actor, created.id)

    with pytest.raises(NotFoundException):
        service.update_message(admin_actor, created.id, is_read=True)
