import uuid

STAFF_PASSWORD = "Staff@123"


def _new_user_body(**overrides):
    body = {
        "firstName": "Nia",
        "lastName": "Nurse",
        "email": f"nia-{uuid.uuid4().hex[:8]}@careportal.test",
        "password": "Secret#1",
        "role": "staff",
    }
    body.update(overrides)
    return body


def test_create_user(client, admin_headers, login):
    body = _new_user_body()
    r = client.post("/api/User", json=body, headers=admin_headers)
    assert r.status_code == 201, r.data
    user = r.get_json()
    assert user["role"] == "Staff"
    assert user["roleDisplayName"] == "Staff"
    assert user["fullName"] == "Nia Nurse"
    assert "password" not in user and "passwordHash" not in user
    assert r.headers["Location"].endswith(f"/api/User/{user['id']}")
    assert login(body["email"], body["password"])["user"]["id"] == user["id"]


def test_duplicate_email_conflict(client, admin_headers):
    body = _new_user_body()
    assert client.post("/api/User", json=body, headers=admin_headers).status_code == 201
    r = client.post("/api/User", json=dict(body, email=body["email"].upper()), headers=admin_headers)
    assert r.status_code == 409


def test_short_password_rejected(client, admin_headers):
    r = client.post("/api/User", json=_new_user_body(password="abc"), headers=admin_headers)
    assert r.status_code == 400
    assert r.get_json()["errors"][0]["field"] == "password"


def test_invalid_email_rejected(client, admin_headers):
    r = client.post("/api/User", json=_new_user_body(email="not-an-email"), headers=admin_headers)
    assert r.status_code == 400


def test_list_and_search(client, admin_headers, user_factory):
    tag = uuid.uuid4().hex[:6]
    user_factory(first_name=f"Quinn{tag}")
    r = client.get(f"/api/User?search=quinn{tag}", headers=admin_headers)
    body = r.get_json()
    assert body["totalCount"] == 1
    assert body["users"][0]["firstName"] == f"Quinn{tag}"


def test_roles_endpoint(client, admin_headers):
    r = client.get("/api/User/roles", headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json() == [
        {"value": 1, "name": "Staff", "displayName": "Staff"},
        {"value": 2, "name": "Admin", "displayName": "Admin"},
    ]


def test_update_role_and_name(client, admin_headers, user_factory):
    user = user_factory()
    r = client.put(f"/api/User/{user['id']}", json={"role": "Admin", "lastName": "Promoted"}, headers=admin_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["role"] == "Admin"
    assert body["lastName"] == "Promoted"
    assert body["firstName"] == "Sam"


def test_update_email_conflict(client, admin_headers, user_factory):
    a = user_factory()
    b = user_factory()
    r = client.put(f"/api/User/{a['id']}", json={"email": b["email"]}, headers=admin_headers)
    assert r.status_code == 409


def test_update_missing_user_is_404(client, admin_headers):
    assert client.put("/api/User/missing", json={"firstName": "X"}, headers=admin_headers).status_code == 404


def test_delete_user(client, admin_headers, user_factory):
    user = user_factory()
    assert client.delete(f"/api/User/{user['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/User/{user['id']}", headers=admin_headers).status_code == 404
    assert client.delete(f"/api/User/{user['id']}", headers=admin_headers).status_code == 404


def test_staff_get_returns_own_profile(client, staff_headers, staff_user, other_staff):
    r = client.get(f"/api/User/{other_staff['id']}", headers=staff_headers)
    assert r.status_code == 200
    assert r.get_json()["id"] == staff_user["id"]


def test_staff_cannot_list_users(client, staff_headers):
    assert client.get("/api/User", headers=staff_headers).status_code == 403


def test_change_own_password(client, user_factory, login):
    user = user_factory()
    headers = {"Authorization": f"Bearer {login(user['email'], STAFF_PASSWORD)['token']}"}
    r = client.post(
        f"/api/User/{user['id']}/change-password",
        json={"currentPassword": STAFF_PASSWORD, "newPassword": "Fresh#456"},
        headers=headers,
    )
    assert r.status_code == 204
    assert login(user["email"], "Fresh#456")["user"]["id"] == user["id"]


def test_change_password_wrong_current(client, user_factory, login):
    user = user_factory()
    headers = {"Authorization": f"Bearer {login(user['email'], STAFF_PASSWORD)['token']}"}
    r = client.post(
        f"/api/User/{user['id']}/change-password",
        json={"currentPassword": "wrong-one", "newPassword": "Fresh#456"},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.get_json() == {"message": "Current password is incorrect"}


def test_change_password_too_short(client, user_factory, login):
    user = user_factory()
    headers = {"Authorization": f"Bearer {login(user['email'], STAFF_PASSWORD)['token']}"}
    r = client.post(
        f"/api/User/{user['id']}/change-password",
        json={"currentPassword": STAFF_PASSWORD, "newPassword": "abc"},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.get_json()["message"].startswith("Password validation failed")


def test_staff_cannot_change_other_password(client, staff_headers, other_staff):
    r = client.post(
        f"/api/User/{other_staff['id']}/change-password",
        json={"currentPassword": STAFF_PASSWORD, "newPassword": "Fresh#456"},
        headers=staff_headers,
    )
    assert r.status_code == 403


def test_admin_change_password_for_missing_user(client, admin_headers):
    r = client.post(
        "/api/User/missing/change-password",
        json={"currentPassword": "x", "newPassword": "Fresh#456"},
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.get_json()["message"] == "User not found"


def test_change_password_rejects_non_object_body(client, admin_headers, admin_auth):
    r = client.post(
        f"/api/User/{admin_auth['user']['id']}/change-password",
        json=["x"],
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.get_json()["error"] == "Password data is required"
