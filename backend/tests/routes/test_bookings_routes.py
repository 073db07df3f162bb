# backend/tests/routes/test_bookings_routes.py
"""
API tests for /api/v1/bookings.
"""

from datetime import timedelta

from simbay.models import Booking, LedgerEntry

BASE = "/api/v1/bookings"


def _iso(value):
    return value.isoformat().replace("+00:00", "Z")


class TestCreateBooking:
    def test_requires_authentication(self, client, slot_start):
        response = client.post(BASE, json={"simulator": "east", "start_time": _iso(slot_start)})

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHENTICATED"

    def test_invalid_token_rejected(self, client):
        response = client.get(f"{BASE}/mine", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_member_books_and_gets_confirmation(
        self, client, member, auth_headers_for, email_sender, slot_start
    ):
        response = client.post(
            BASE,
            json={"simulator": "East", "start_time": _iso(slot_start)},
            headers=auth_headers_for(member),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["simulator"] == "east"
        assert body["user_id"] == member.id
        assert [m["to"] for m in email_sender.sent] == [member.email]

    def test_overlap_returns_slot_conflict(
        self, client, member, other_member, auth_headers_for, make_booking, slot_start
    ):
        make_booking(other_member, "east", slot_start - timedelta(hours=1))

        response = client.post(
            BASE,
            json={"simulator": "east", "start_time": _iso(slot_start)},
            headers=auth_headers_for(member),
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "SLOT_CONFLICT"

    def test_second_upcoming_booking_hits_quota(
        self, client, member, auth_headers_for, make_booking, slot_start
    ):
        existing = make_booking(member, "west", slot_start)

        response = client.post(
            BASE,
            json={"simulator": "east", "start_time": _iso(slot_start + timedelta(days=1))},
            headers=auth_headers_for(member),
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "QUOTA_EXCEEDED"
        assert detail["details"]["existing_booking_id"] == existing.id

    def test_misaligned_start_is_validation_error(self, client, member, auth_headers_for, slot_start):
        response = client.post(
            BASE,
            json={"simulator": "east", "start_time": _iso(slot_start + timedelta(minutes=30))},
            headers=auth_headers_for(member),
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"

    def test_unknown_field_rejected(self, client, member, auth_headers_for, slot_start):
        response = client.post(
            BASE,
            json={"simulator": "east", "start_time": _iso(slot_start), "end_time": "x"},
            headers=auth_headers_for(member),
        )

        assert response.status_code == 400

    def test_member_cannot_book_for_others(
        self, client, member, other_member, auth_headers_for, slot_start
    ):
        response = client.post(
            BASE,
            json={
                "simulator": "east",
                "start_time": _iso(slot_start),
                "target_user_id": other_member.id,
            },
            headers=auth_headers_for(member),
        )

        assert response.status_code == 403

    def test_admin_books_for_member(self, client, admin, member, auth_headers_for, email_sender, slot_start):
        response = client.post(
            BASE,
            json={"simulator": "west", "start_time": _iso(slot_start), "target_user_id": member.id},
            headers=auth_headers_for(admin),
        )

        assert response.status_code == 201
        assert response.json()["user_id"] == member.id
        assert "Alex Admin" in email_sender.sent[0]["html"]

    def test_email_failure_does_not_fail_booking(
        self, client, member, auth_headers_for, email_sender, slot_start
    ):
        email_sender.fail = True

        response = client.post(
            BASE,
            json={"simulator": "east", "start_time": _iso(slot_start)},
            headers=auth_headers_for(member),
        )

        assert response.status_code == 201


class TestCancelBooking:
    def test_cancel_removes_guest_fees(
        self, client, db, member, auth_headers_for, make_booking, make_entry, slot_start
    ):
        booking = make_booking(member, "east", slot_start)
        make_entry(member, "guest_fee", "20.00", booking=booking)

        response = client.delete(f"{BASE}/{booking.id}", headers=auth_headers_for(member))

        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted_guest_fees": 1}
        assert db.query(Booking).count() == 0
        assert db.query(LedgerEntry).count() == 0

    def test_cannot_cancel_someone_elses(
        self, client, member, other_member, auth_headers_for, make_booking, slot_start
    ):
        booking = make_booking(other_member, "east", slot_start)

        response = client.delete(f"{BASE}/{booking.id}", headers=auth_headers_for(member))

        assert response.status_code == 403

    def test_missing_booking(self, client, member, auth_headers_for):
        response = client.delete(f"{BASE}/12345", headers=auth_headers_for(member))

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"


class TestListings:
    def test_day_schedule_includes_member_names(
        self, client, member, auth_headers_for, make_booking, slot_start
    ):
        make_booking(member, "east", slot_start)

        response = client.get(
            BASE, params={"date": "2031-06-02"}, headers=auth_headers_for(member)
        )

        assert response.status_code == 200
        assert [row["user_name"] for row in response.json()] == ["Pat Putter"]

    def test_display_board_is_public(self, client, member, make_booking, slot_start):
        make_booking(member, "east", slot_start)

        response = client.get(f"{BASE}/display", params={"date": "2031-06-02"})

        assert response.status_code == 200
        rows = response.json()
        assert rows[0]["member_name"] == "Pat Putter"
        assert "email" not in rows[0]
        assert "user_id" not in rows[0]

    def test_unknown_simulator_filter(self, client):
        response = client.get(f"{BASE}/display", params={"date": "2031-06-02", "simulator": "north"})

        assert response.status_code == 400

    def test_report_for_admin_only(
        self, client, admin, member, auth_headers_for, make_booking, make_entry, slot_start
    ):
        booking = make_booking(member, "east", slot_start)
        make_entry(member, "guest_fee", "20.00", booking=booking)
        params = {"start": "2031-06-01", "end": "2031-06-30"}

        forbidden = client.get(f"{BASE}/report", params=params, headers=auth_headers_for(member))
        allowed = client.get(f"{BASE}/report", params=params, headers=auth_headers_for(admin))

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()[0]["guest_fee_total"] == 20.0
        assert allowed.json()[0]["user_email"] == member.email
