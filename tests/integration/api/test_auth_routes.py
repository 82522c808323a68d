"""Integration tests for auth routes and app-level endpoints."""


def test_login_success(client, admin_password):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": admin_password})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["username"] == "admin"
    assert body["data"]["token"]


def test_login_wrong_password(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {
        "success": False,
        "message": "Invalid credentials",
        "error": "auth_error",
    }


def test_login_missing_fields(client):
    resp = client.post("/api/auth/login", json={})
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_verify_with_token(client, auth_headers):
    resp = client.get("/api/auth/verify", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"username": "admin", "role": "admin"}


def test_verify_without_token(client):
    resp = client.get("/api/auth/verify")
    assert resp.status_code == 401
    assert resp.json()["message"] == "No token provided"
    assert resp.headers["www-authenticate"] == "Bearer"


def test_verify_garbage_token(client):
    resp = client.get("/api/auth/verify", headers={"Authorization": "Bearer nonsense"})
    assert resp.status_code == 401


def test_token_expires_after_a_day(client, auth_headers, clock):
    clock.advance(hours=25)
    resp = client.get("/api/auth/verify", headers=auth_headers)
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token expired"


def test_logout(client):
    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_health_and_index(client):
    assert client.get("/health").json() == {"status": "ok", "service": "api"}
    index = client.get("/").json()
    assert index["endpoints"]["articles"] == "/api/articles"


def test_unknown_route_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Route not found", "error": "http_404"}


def test_unknown_media_is_404(client):
    resp = client.get("/media/jkrishnan-gallery/missing.jpg")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_invalid_json_body(client, auth_headers):
    resp = client.post(
        "/api/articles",
        content=b"{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["code"] == "invalid_json"


def test_wrong_method_envelope_keeps_allow_header(client):
    resp = client.put("/health")
    assert resp.status_code == 405
    assert resp.json() == {
        "success": False,
        "message": "Method Not Allowed",
        "error": "http_405",
    }
    assert "GET" in resp.headers["allow"]
