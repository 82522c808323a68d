import pytest
from fastapi.testclient import TestClient

from firmsite.adapters.auth.tokens import get_password_hash
from firmsite.api.deps import Settings, get_clock, get_settings
from firmsite.api.main import app

ADMIN_PASSWORD = "correct-horse"


@pytest.fixture(scope="session")
def admin_password_hash():
    return get_password_hash(ADMIN_PASSWORD)


@pytest.fixture
def settings(tmp_path, admin_password_hash, monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD_HASH", admin_password_hash)
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    s = Settings()
    s.data_dir = tmp_path / "data"
    s.db_path = str(s.data_dir / "test.db")
    s.media_dir = s.data_dir / "media"
    s.media_base_url = "/media"
    s.secret_key = "test-secret"
    s.rules_path = None
    return s


@pytest.fixture
def client(settings, clock):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_clock] = lambda: clock
    # Entering the context runs the lifespan, which migrates the test database
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD
