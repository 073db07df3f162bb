# backend/tests/routes/test_health_routes.py
def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["environment"] == "test"
    assert "X-Commit-Sha" in response.headers


def test_prometheus_metrics_exposed(client, member, auth_headers_for):
    client.get("/api/v1/users/me", headers=auth_headers_for(member))

    response = client.get("/metrics/prometheus")

    assert response.status_code == 200
    assert "simbay_" in response.text
