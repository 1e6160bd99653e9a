import pytest


@pytest.fixture
def incident_body(make_client, staff_user):
    def _body(**overrides):
        owner = make_client()
        body = {
            "clientId": owner["id"],
            "staffId": staff_user["id"],
            "title": "Slipped in hallway",
            "description": "Minor bruise",
            "incidentDate": "2024-04-02",
            "incidentTime": "14:30",
            "location": "Hallway",
        }
        body.update(overrides)
        return body

    return _body


def test_create_defaults_and_display_names(client, admin_headers, incident_body):
    r = client.post("/api/Incident", json=incident_body(), headers=admin_headers)
    assert r.status_code == 201, r.data
    inc = r.get_json()
    assert r.headers["Location"].endswith(f"/api/Incident/{inc['id']}")
    assert inc["status"] == 1 and inc["statusDisplayName"] == "Open"
    assert inc["severity"] == 1 and inc["severityDisplayName"] == "Low"
    assert inc["incidentTime"] == "14:30:00"
    assert inc["incidentDate"].startswith("2024-04-02")
    assert inc["staffName"] == "Sam Staff"
    assert inc["clientName"] == "Ada Lovelace"


def test_create_accepts_enum_names(client, admin_headers, incident_body):
    r = client.post(
        "/api/Incident",
        json=incident_body(status="InProgress", severity="critical"),
        headers=admin_headers,
    )
    assert r.status_code == 201
    inc = r.get_json()
    assert inc["status"] == 2
    assert inc["severity"] == 4


def test_create_rejects_bad_enum(client, admin_headers, incident_body):
    r = client.post("/api/Incident", json=incident_body(severity=9), headers=admin_headers)
    assert r.status_code == 400
    assert r.get_json()["errors"][0]["field"] == "severity"


@pytest.mark.parametrize("missing", ["clientId", "staffId", "title", "incidentDate", "incidentTime"])
def test_create_required_fields(client, admin_headers, incident_body, missing):
    body = incident_body()
    body.pop(missing)
    r = client.post("/api/Incident", json=body, headers=admin_headers)
    assert r.status_code == 400
    assert r.get_json()["errors"][0]["field"] == missing


def test_create_unknown_staff(client, admin_headers, incident_body):
    r = client.post("/api/Incident", json=incident_body(staffId="no-such-user"), headers=admin_headers)
    assert r.status_code == 400


def test_update_and_filter(client, admin_headers, incident_body):
    inc = client.post("/api/Incident", json=incident_body(), headers=admin_headers).get_json()
    r = client.put(
        f"/api/Incident/{inc['id']}",
        json={"status": "Resolved", "severity": 3, "location": ""},
        headers=admin_headers,
    )
    assert r.status_code == 200
    body = r.get_json()
    assert body["statusDisplayName"] == "Resolved"
    assert body["severityDisplayName"] == "High"
    assert body["location"] == "Hallway"
    assert body["updatedAt"] is not None

    r = client.get("/api/Incident?status=Resolved&severity=High&pageSize=100", headers=admin_headers)
    listed = r.get_json()
    assert inc["id"] in [i["id"] for i in listed["incidents"]]
    assert all(i["status"] == 3 and i["severity"] == 3 for i in listed["incidents"])
    assert listed["totalCount"] == len(listed["incidents"])


def test_update_missing_is_404(client, admin_headers):
    assert client.put("/api/Incident/999999", json={"title": "x"}, headers=admin_headers).status_code == 404


def test_soft_delete(client, admin_headers, incident_body):
    inc = client.post("/api/Incident", json=incident_body(), headers=admin_headers).get_json()
    assert client.delete(f"/api/Incident/{inc['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/Incident/{inc['id']}", headers=admin_headers).status_code == 404
    assert client.delete(f"/api/Incident/{inc['id']}", headers=admin_headers).status_code == 404


def test_incidents_admin_only(client, staff_headers):
    assert client.get("/api/Incident", headers=staff_headers).status_code == 403
