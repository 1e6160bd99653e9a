from datetime import timedelta

import pytest

from careportal.jobtime_service import format_duration


def test_format_duration():
    assert format_duration(None) is None
    assert format_duration(timedelta(hours=1, minutes=2, seconds=3)) == "01:02:03"
    assert format_duration(timedelta(hours=26, minutes=5)) == "26:05:00"


@pytest.fixture
def job_body(make_client, staff_user):
    def _body(**overrides):
        owner = make_client()
        body = {
            "clientId": owner["id"],
            "staffId": staff_user["id"],
            "startTime": "2024-06-01T09:00:00Z",
            "activityType": 2,
            "notes": "Walk in the park",
        }
        body.update(overrides)
        return body

    return _body


def test_staff_logs_own_time(client, staff_headers, staff_user, job_body):
    r = client.post("/api/JobTime", json=job_body(endTime="2024-06-01T10:30:15Z"), headers=staff_headers)
    assert r.status_code == 201, r.data
    job = r.get_json()
    assert job["staffId"] == staff_user["id"]
    assert job["activityTypeDisplayName"] == "Garden Walk"
    assert job["duration"] == "01:30:15"
    assert job["isCompleted"] is True
    assert job["clientName"] == "Ada Lovelace"

    r = client.get(f"/api/JobTime/{job['id']}", headers=staff_headers)
    assert r.status_code == 200


def test_staff_cannot_log_for_someone_else(client, staff_headers, other_staff, job_body):
    r = client.post("/api/JobTime", json=job_body(staffId=other_staff["id"]), headers=staff_headers)
    assert r.status_code == 403


def test_staff_cannot_touch_foreign_entries(client, admin_headers, staff_headers, other_staff, job_body):
    foreign = client.post("/api/JobTime", json=job_body(staffId=other_staff["id"]), headers=admin_headers).get_json()
    jid = foreign["id"]
    assert client.get(f"/api/JobTime/{jid}", headers=staff_headers).status_code == 403
    assert client.put(f"/api/JobTime/{jid}", json={"notes": "x"}, headers=staff_headers).status_code == 403
    assert client.post(f"/api/JobTime/{jid}/complete", headers=staff_headers).status_code == 403
    assert client.delete(f"/api/JobTime/{jid}", headers=staff_headers).status_code == 403

    listed = client.get("/api/JobTime?pageSize=100", headers=staff_headers).get_json()
    assert jid not in [j["id"] for j in listed["jobTimes"]]


def test_end_before_start_rejected(client, admin_headers, job_body):
    r = client.post(
        "/api/JobTime",
        json=job_body(startTime="2024-06-01T10:00:00", endTime="2024-06-01T09:00:00"),
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert r.get_json()["errors"][0]["field"] == "endTime"


def test_activity_type_required_and_validated(client, admin_headers, job_body):
    body = job_body()
    body.pop("activityType")
    assert client.post("/api/JobTime", json=body, headers=admin_headers).status_code == 400
    r = client.post("/api/JobTime", json=job_body(activityType=99), headers=admin_headers)
    assert r.status_code == 400


def test_complete_sets_end_time(client, staff_headers, job_body):
    job = client.post("/api/JobTime", json=job_body(), headers=staff_headers).get_json()
    assert job["isCompleted"] is False
    assert job["duration"] is None

    r = client.post(
        f"/api/JobTime/{job['id']}/complete",
        json={"endTime": "2024-06-01T11:15:00Z"},
        headers=staff_headers,
    )
    assert r.status_code == 200
    done = r.get_json()
    assert done["isCompleted"] is True
    assert done["duration"] == "02:15:00"


def test_complete_without_body_uses_now(client, staff_headers, job_body):
    job = client.post("/api/JobTime", json=job_body(), headers=staff_headers).get_json()
    r = client.post(f"/api/JobTime/{job['id']}/complete", headers=staff_headers)
    assert r.status_code == 200
    assert r.get_json()["endTime"] is not None


def test_update_and_delete(client, admin_headers, job_body):
    job = client.post("/api/JobTime", json=job_body(), headers=admin_headers).get_json()
    r = client.put(
        f"/api/JobTime/{job['id']}",
        json={"activityType": "Companionship", "notes": "Tea and chat"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    body = r.get_json()
    assert body["activityType"] == 6
    assert body["notes"] == "Tea and chat"

    assert client.delete(f"/api/JobTime/{job['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/JobTime/{job['id']}", headers=admin_headers).status_code == 404
    assert client.delete(f"/api/JobTime/{job['id']}", headers=admin_headers).status_code == 404


def test_admin_list_filters_by_client(client, admin_headers, job_body):
    job = client.post("/api/JobTime", json=job_body(), headers=admin_headers).get_json()
    r = client.get(f"/api/JobTime?clientId={job['clientId']}", headers=admin_headers)
    body = r.get_json()
    assert body["totalCount"] == 1
    assert body["jobTimes"][0]["id"] == job["id"]
