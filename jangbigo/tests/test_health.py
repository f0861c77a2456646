def test_health_ok(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == 200
    assert body["data"]["status"] == "ok"
    assert body["data"]["database"] == "ok"


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/v1/nope")
    assert r.status_code == 404
    assert r.json() == {"message": "Not Found", "status": 404, "data": None}
