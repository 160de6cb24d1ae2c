"""Tests for GET /health."""


def test_health_check_should_return_ok(client):
    # Act
    resp = client.get("/health")

    # Assert
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "fx-brief"


def test_health_check_should_not_hit_conversion_route(client, fake_source):
    # Act
    resp = client.get("/health", params={"from": "USD", "to": "CNY"})

    # Assert
    assert resp.headers["content-type"].startswith("application/json")
    assert fake_source.calls == []
