from careportal.audit_repo import AuditRepo
from careportal.auth_service import INVALID_CREDENTIALS, REFRESH_NOT_IMPLEMENTED

ADMIN_EMAIL = "admin@careportal.test"
ADMIN_PASSWORD = "Admin@123"
STAFF_PASSWORD = "Staff@123"


def test_login_returns_tokens_and_user(client):
    r = client.post("/api/Auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    body = r.get_json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    data = body["data"]
    assert data["token"].count(".") == 2
    assert data["refreshToken"]
    assert data["user"]["email"] == ADMIN_EMAIL
    assert data["user"]["role"] == "Admin"
    assert data["user"]["lastLoginAt"] is not None


def test_login_email_is_case_insensitive(client):
    r = client.post("/api/Auth/login", json={"email": ADMIN_EMAIL.upper(), "password": ADMIN_PASSWORD})
    assert r.status_code == 200


def test_login_wrong_password_is_401_envelope(client):
    r = client.post("/api/Auth/login", json={"email": ADMIN_EMAIL, "password": "nope-nope"})
    assert r.status_code == 401
    body = r.get_json()
    assert body == {"success": False, "message": INVALID_CREDENTIALS}


def test_login_unknown_user_same_message(client):
    r = client.post("/api/Auth/login", json={"email": "ghost@careportal.test", "password": "whatever"})
    assert r.status_code == 401
    assert r.get_json()["message"] == INVALID_CREDENTIALS


def test_login_missing_fields_is_400(client):
    r = client.post("/api/Auth/login", json={"email": ADMIN_EMAIL})
    assert r.status_code == 400
    body = r.get_json()
    assert body["errors"][0]["field"] == "password"


def test_login_inactive_user_rejected(client, admin_headers, user_factory):
    user = user_factory()
    r = client.post(f"/api/User/{user['id']}/toggle-active", headers=admin_headers)
    assert r.status_code == 204
    r = client.post("/api/Auth/login", json={"email": user["email"], "password": STAFF_PASSWORD})
    assert r.status_code == 401


def test_login_records_audit_events(app_session, client):
    client.post("/api/Auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    client.post("/api/Auth/login", json={"email": ADMIN_EMAIL, "password": "bad-password"})
    with app_session.app_context():
        repo = AuditRepo()
        assert repo.recent(event="login", limit=5)
        failed = repo.recent(event="login_failed", limit=5)
    assert failed and failed[0].payload["email"] == ADMIN_EMAIL


def test_refresh_token_not_implemented(client):
    r = client.post("/api/Auth/refresh-token", json={"refreshToken": "abc"})
    assert r.status_code == 401
    assert r.get_json() == {"success": False, "message": REFRESH_NOT_IMPLEMENTED}


def test_refresh_token_requires_body_field(client):
    r = client.post("/api/Auth/refresh-token", json={})
    assert r.status_code == 400


def test_logout_requires_token(client):
    r = client.post("/api/Auth/logout")
    assert r.status_code == 401
    assert r.get_json()["error"] == "Unauthorized access"
    assert r.headers.get("WWW-Authenticate") == "Bearer"


def test_logout_ok(client, staff_headers):
    r = client.post("/api/Auth/logout", headers=staff_headers)
    assert r.status_code == 200
    assert r.get_json() == {"success": True, "message": "Logout successful"}


def test_tampered_token_rejected(client, admin_auth):
    token = admin_auth["token"]
    bad = token[:-2] + ("AA" if not token.endswith("AA") else "BB")
    r = client.get("/api/Client", headers={"Authorization": f"Bearer {bad}"})
    assert r.status_code == 401
