"""Service functions that no endpoint calls directly."""
from datetime import datetime, timedelta

import pytest

from careportal import (
    client_service,
    dashboard_service,
    document_service,
    incident_service,
    jobtime_service,
    user_service,
)
from careportal.enums import ActivityType, IncidentSeverity
from careportal.models import Role, utcnow
from careportal.unit_of_work import UnitOfWork


@pytest.fixture
def ctx(app_session):
    with app_session.app_context():
        yield


def test_client_counts_and_active_list(ctx, make_client):
    created = make_client(firstName="Counted")
    with UnitOfWork() as uow:
        active_ids = [c["id"] for c in client_service.get_active_clients(uow)]
        assert created["id"] in active_ids
        assert client_service.get_total_count(uow) >= client_service.get_active_count(uow) >= 1


def test_document_queries_by_client_status_and_overdue(ctx, make_client):
    owner = make_client()
    today = utcnow().replace(hour=12, minute=0, second=0, microsecond=0)
    with UnitOfWork() as uow:
        late = document_service.create(uow, client_id=owner["id"], title="Late", deadline=today - timedelta(days=2))
        soon = document_service.create(uow, client_id=owner["id"], title="Soon", deadline=today + timedelta(days=2))
        mine = document_service.get_by_client(uow, owner["id"])
        assert {d["id"] for d in mine} == {late["id"], soon["id"]}
        assert all(d["uploadedBy"] == "System" for d in mine)

        overdue = document_service.get_overdue(uow)
        assert late["id"] in [d["id"] for d in overdue]
        assert soon["id"] not in [d["id"] for d in overdue]

        pending_ids = [d["id"] for d in document_service.get_by_status(uow, "pending")]
        assert soon["id"] in pending_ids

        stats = document_service.get_stats_by_client(uow, owner["id"])
        assert stats == {"totalDocuments": 2, "pendingDocuments": 1, "uploadDocuments": 0, "overdueDocuments": 1}


def test_document_status_lookup_uses_business_rules(ctx, make_client):
    owner = make_client()
    today = utcnow().replace(hour=12, minute=0, second=0, microsecond=0)
    with UnitOfWork() as uow:
        due = document_service.create(uow, client_id=owner["id"], title="Due Today", deadline=today)
        document_service.upload_document(uow, due["id"], file_name="x.pdf", file_size=3, file_type=".pdf")
        lapsed = document_service.create(uow, client_id=owner["id"], title="Lapsed", deadline=today + timedelta(days=1))
        # Stored status stays "pending" after the deadline passes
        entity = uow.documents.get(lapsed["id"])
        entity.deadline = today - timedelta(days=3)
        uow.save_changes()
        assert entity.status == "pending"

        uploaded_ids = [d["id"] for d in document_service.get_by_status(uow, "Uploaded")]
        assert due["id"] in uploaded_ids
        assert lapsed["id"] not in uploaded_ids

        pending_ids = [d["id"] for d in document_service.get_by_status(uow, "pending")]
        assert due["id"] not in pending_ids
        assert lapsed["id"] not in pending_ids

        any_ids = [d["id"] for d in document_service.get_by_status(uow, "whatever")]
        assert {due["id"], lapsed["id"]} <= set(any_ids)


def test_incident_lookups(ctx, make_client, staff_user):
    owner = make_client()
    with UnitOfWork() as uow:
        inc = incident_service.create(
            uow,
            client_id=owner["id"],
            staff_id=staff_user["id"],
            title="Fall",
            incident_date=datetime(2024, 1, 5),
            incident_time=datetime(2024, 1, 5, 8, 15).time(),
            severity=IncidentSeverity.Medium,
        )
        assert [i["id"] for i in incident_service.get_by_client(uow, owner["id"])] == [inc["id"]]
        assert inc["id"] in [i["id"] for i in incident_service.get_by_staff(uow, staff_user["id"])]
        assert inc["severityDisplayName"] == "Medium"


def test_jobtime_lookups_and_stats(ctx, make_client, user_factory):
    owner = make_client()
    worker = user_factory()
    start = datetime(2011, 3, 4, 9, 0)
    with UnitOfWork() as uow:
        done = jobtime_service.create(
            uow,
            client_id=owner["id"],
            staff_id=worker["id"],
            start_time=start,
            end_time=start + timedelta(hours=2),
            activity_type=ActivityType.PersonalCare,
        )
        open_job = jobtime_service.create(
            uow,
            client_id=owner["id"],
            staff_id=worker["id"],
            start_time=start + timedelta(days=1),
            activity_type=ActivityType.Other,
        )
        assert [j["id"] for j in jobtime_service.get_by_client(uow, owner["id"])] == [open_job["id"], done["id"]]
        assert len(jobtime_service.get_by_staff(uow, worker["id"])) == 2

        in_range = jobtime_service.get_by_date_range(uow, start - timedelta(hours=1), start + timedelta(hours=1))
        assert [j["id"] for j in in_range] == [done["id"]]

        expected = {"totalJobTimes": 2, "activeJobTimes": 2, "completedJobTimes": 1, "ongoingJobTimes": 1}
        assert jobtime_service.get_stats_by_staff(uow, worker["id"]) == expected
        assert jobtime_service.get_stats_by_client(uow, owner["id"]) == expected
        assert set(jobtime_service.get_stats(uow)) == set(expected)

        assert jobtime_service.complete(uow, open_job["id"], end_time=start + timedelta(days=1, minutes=30)) is True
        assert jobtime_service.complete(uow, 999999, end_time=start) is False


def test_dashboard_by_client_filters_on_related_name(ctx, make_client):
    make_client()
    with UnitOfWork() as uow:
        board = dashboard_service.get_dashboard_by_client(uow, 987654321)
    assert board["recentActivities"] == []
    assert "totalClients" in board["stats"]


def test_user_lookups_and_reset_password(ctx, login, user_factory):
    user = user_factory(first_name="Reset")
    with UnitOfWork() as uow:
        assert user_service.get_by_email(uow, user["email"].upper())["id"] == user["id"]
        assert user["id"] in [u["id"] for u in user_service.get_by_role(uow, "staff")]
        assert user_service.reset_password(uow, user["email"], "abc") is False
        assert user_service.reset_password(uow, "nobody@careportal.test", "Valid#123") is False
        assert user_service.reset_password(uow, user["email"], "Valid#123") is True
    assert login(user["email"], "Valid#123")["user"]["id"] == user["id"]


def test_role_management(ctx):
    with UnitOfWork() as uow:
        assert {"Admin", "Staff"} <= set(user_service.get_all_roles(uow))
        assert user_service.role_exists(uow, "admin") is True
        assert user_service.create_role(uow, "Auditor") is True
        assert user_service.create_role(uow, "Auditor") is False
        assert uow.roles.by_name("auditor").description == "Auditor role for CarePortal"
        # Roles outside the UserRole enum are not offered to the UI
        assert "Auditor" not in [r["name"] for r in user_service.get_user_roles(uow)]
        assert user_service.delete_role(uow, "Auditor") is True
        assert user_service.delete_role(uow, "Auditor") is False


def test_unit_of_work_transaction_rolls_back(ctx):
    with UnitOfWork() as uow:
        def _boom(u):
            u.repository(Role).add(Role(name="Temporary", created_at=utcnow()))
            u.db.flush()
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            uow.run_in_transaction(_boom)
        assert uow.roles.by_name("Temporary") is None
