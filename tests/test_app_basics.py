def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}


def test_request_id_echoed_and_security_headers(client):
    r = client.get("/healthz", headers={"X-Request-Id": "req-123"})
    assert r.headers["X-Request-Id"] == "req-123"
    assert "X-Request-Duration-ms" in r.headers
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Cache-Control"] == "no-store"
    # HSTS is skipped under TESTING
    assert "Strict-Transport-Security" not in r.headers


def test_error_envelope_carries_request_id(client, admin_headers):
    r = client.get("/api/Client/999999", headers=dict(admin_headers, **{"X-Request-Id": "rid-404"}))
    assert r.status_code == 404
    assert r.get_json() == {"error": "Client not found", "requestId": "rid-404"}


def test_unknown_route_is_json_404(client):
    r = client.get("/api/Nope")
    assert r.status_code == 404
    assert "error" in r.get_json()


def test_non_json_body_is_400(client, admin_headers):
    r = client.post("/api/Client", data="not json", headers=admin_headers, content_type="text/plain")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Client data is required"


def test_cors_allow_list(app_session, client, monkeypatch):
    monkeypatch.setitem(app_session.config, "CORS_ALLOWED_ORIGINS", ["https://care.example"])
    r = client.options(
        "/api/Client",
        headers={"Origin": "https://care.example", "Access-Control-Request-Headers": "Authorization"},
    )
    assert r.status_code in (200, 204)
    assert r.headers["Access-Control-Allow-Origin"] == "https://care.example"
    assert r.headers["Access-Control-Allow-Headers"] == "Authorization"

    r = client.get("/healthz", headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in r.headers


def test_seed_is_idempotent(app_session):
    from careportal.seed import ensure_admin_user, ensure_roles
    from careportal.unit_of_work import UnitOfWork

    with app_session.app_context():
        assert ensure_roles() == []
        assert ensure_admin_user("admin@careportal.test", "Admin@123") is False
        with UnitOfWork() as uow:
            admin = uow.users.by_email("admin@careportal.test")
            assert admin is not None
            assert (admin.full_name, admin.role) == ("Admin User", "Admin")


def test_seed_cli_command_registered(app_session):
    result = app_session.test_cli_runner().invoke(args=["seed"])
    assert result.exit_code == 0
    assert "seed complete" in result.output
