# backend/tests/routes/test_transactions_routes.py
BASE = "/api/v1/transactions"


def test_member_balance_is_clamped(client, member, auth_headers_for, make_entry):
    make_entry(member, "guest_fee", "20.00")
    make_entry(member, "payment", "-50.00")

    response = client.get(f"{BASE}/balance", headers=auth_headers_for(member))

    assert response.status_code == 200
    assert response.json() == {"user_id": member.id, "balance": 0.0}


def test_member_cannot_read_other_balance(client, member, other_member, auth_headers_for):
    response = client.get(
        f"{BASE}/balance", params={"user_id": other_member.id}, headers=auth_headers_for(member)
    )

    assert response.status_code == 403


def test_adjust_fee_to_zero(client, admin, member, auth_headers_for, make_entry):
    make_entry(member, "guest_fee", "20.00")

    response = client.post(
        f"{BASE}/adjustments",
        json={"user_id": member.id, "target_balance": 0, "reason": "Waived"},
        headers=auth_headers_for(admin),
    )

    assert response.status_code == 201
    assert response.json()["amount"] == -20.0
    balance = client.get(
        f"{BASE}/balance", params={"user_id": member.id}, headers=auth_headers_for(admin)
    )
    assert balance.json()["balance"] == 0.0
    history = client.get(f"{BASE}/adjustments", headers=auth_headers_for(admin)).json()
    assert history[0]["user_name"] == "Pat Putter"
    assert history[0]["description"] == "Balance adjusted from $20.00 to $0.00: Waived"


def test_negative_target_rejected(client, admin, member, auth_headers_for):
    response = client.post(
        f"{BASE}/adjustments",
        json={"user_id": member.id, "target_balance": -5},
        headers=auth_headers_for(admin),
    )

    assert response.status_code == 400


def test_payment_recorded_negative(client, admin, member, auth_headers_for):
    response = client.post(
        f"{BASE}/payments", json={"user_id": member.id, "amount": 15}, headers=auth_headers_for(admin)
    )

    assert response.status_code == 201
    assert response.json()["amount"] == -15.0
    assert response.json()["type"] == "payment"


def test_non_numeric_payment_rejected(client, admin, member, auth_headers_for):
    response = client.post(
        f"{BASE}/payments",
        json={"user_id": member.id, "amount": "abc"},
        headers=auth_headers_for(admin),
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_member_cannot_record_payment(client, member, auth_headers_for):
    response = client.post(
        f"{BASE}/payments", json={"user_id": member.id, "amount": 15}, headers=auth_headers_for(member)
    )

    assert response.status_code == 403


def test_member_adds_and_removes_guest_fee(
    client, member, auth_headers_for, make_booking, slot_start
):
    booking = make_booking(member, "east", slot_start)
    headers = auth_headers_for(member)

    created = client.post(f"{BASE}/guest-fees", json={"booking_id": booking.id}, headers=headers)
    assert created.status_code == 201
    assert created.json()["amount"] == 20.0

    fees = client.get(f"{BASE}/guest-fees", headers=headers).json()
    assert [fee["id"] for fee in fees] == [created.json()["id"]]

    removed = client.delete(f"{BASE}/{created.json()['id']}", headers=headers)
    assert removed.status_code == 200
    assert client.get(BASE, headers=headers).json() == []


def test_all_balances_for_admin(client, admin, member, other_member, auth_headers_for, make_entry):
    make_entry(member, "guest_fee", "20.00")
    make_entry(other_member, "guest_fee", "40.00")

    response = client.get(f"{BASE}/balances", headers=auth_headers_for(admin))

    assert [row["user_id"] for row in response.json()] == [other_member.id, member.id]
