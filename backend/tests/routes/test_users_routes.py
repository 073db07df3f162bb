# backend/tests/routes/test_users_routes.py
BASE = "/api/v1/users"


def test_me_returns_profile(client, member, auth_headers_for):
    response = client.get(f"{BASE}/me", headers=auth_headers_for(member))

    assert response.status_code == 200
    assert response.json()["email"] == member.email
    assert response.json()["role"] == "user"


def test_token_without_profile_is_unauthenticated(client):
    from simbay.auth import create_access_token

    token = create_access_token("no-such-profile", "ghost@example.com")

    response = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_member_cannot_change_own_role(client, member, auth_headers_for):
    response = client.patch(
        f"{BASE}/me", json={"role": "admin"}, headers=auth_headers_for(member)
    )

    assert response.status_code == 400


def test_member_updates_phone(client, member, auth_headers_for):
    response = client.patch(
        f"{BASE}/me", json={"phone": "555-0123"}, headers=auth_headers_for(member)
    )

    assert response.status_code == 200
    assert response.json()["phone"] == "555-0123"
    assert response.json()["name"] == member.name


def test_admin_creates_lists_and_deletes(client, admin, auth_headers_for, identity_client):
    headers = auth_headers_for(admin)

    created = client.post(
        BASE,
        json={"email": "new@example.com", "password": "secret123", "name": "Nia New"},
        headers=headers,
    )
    assert created.status_code == 201
    new_id = created.json()["id"]
    assert new_id in identity_client.users

    names = [row["name"] for row in client.get(BASE, headers=headers).json()]
    assert names == ["Alex Admin", "Nia New"]

    deleted = client.delete(f"{BASE}/{new_id}", headers=headers)
    assert deleted.status_code == 200
    assert new_id not in identity_client.users


def test_short_password_rejected(client, admin, auth_headers_for):
    response = client.post(
        BASE,
        json={"email": "new@example.com", "password": "123", "name": "Nia New"},
        headers=auth_headers_for(admin),
    )

    assert response.status_code == 400


def test_member_cannot_list_users(client, member, auth_headers_for):
    assert client.get(BASE, headers=auth_headers_for(member)).status_code == 403


def test_admin_sets_membership_expiry(client, admin, member, auth_headers_for):
    headers = auth_headers_for(admin)

    response = client.put(
        f"{BASE}/{member.id}", json={"active_until": "2020-01-01T00:00:00Z"}, headers=headers
    )

    assert response.status_code == 200
    report = client.get(f"{BASE}/membership-report", headers=headers).json()
    row = next(r for r in report if r["id"] == member.id)
    assert row["is_expired"] is True
