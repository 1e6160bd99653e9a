import os
import sys
import uuid

import pytest

ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

ADMIN_EMAIL = "admin@careportal.test"
ADMIN_PASSWORD = "Admin@123"
STAFF_PASSWORD = "Staff@123"


def _lazy_imports():
    from careportal.app_factory import create_app  # noqa: E402

    return create_app


@pytest.fixture(scope="session")
def app_session(tmp_path_factory):
    create_app = _lazy_imports()
    base = tmp_path_factory.mktemp("careportal")
    url = f"sqlite:///{base / 'test_app.db'}"
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "database_url": url,
            "upload_document_path": str(base / "uploads" / "documents"),
            "upload_incident_path": str(base / "uploads" / "incidents"),
            "upload_max_file_size_mb": 1,
            "seed_admin_email": ADMIN_EMAIL,
            "seed_admin_password": ADMIN_PASSWORD,
            "FORCE_DB_REINIT": True,
            "DEV_CREATE_ALL": True,
        }
    )
    return app


@pytest.fixture
def client(app_session):
    c = app_session.test_client()
    c.environ_base = {}
    return c


def _login(client, email, password):
    r = client.post("/api/Auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.data
    return r.get_json()["data"]


@pytest.fixture(scope="session")
def admin_auth(app_session):
    return _login(app_session.test_client(), ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def admin_headers(admin_auth):
    return {"Authorization": f"Bearer {admin_auth['token']}"}


def make_user(app, *, role="Staff", password=STAFF_PASSWORD, first_name="Sam", last_name="Staff"):
    """Create a user through the service layer and return its DTO."""
    from careportal import user_service
    from careportal.unit_of_work import UnitOfWork

    with app.app_context():
        with UnitOfWork() as uow:
            return user_service.create(
                uow,
                first_name=first_name,
                last_name=last_name,
                email=f"{role.lower()}-{uuid.uuid4().hex[:8]}@careportal.test",
                password=password,
                role=role,
            )


@pytest.fixture(scope="session")
def staff_user(app_session):
    return make_user(app_session)


@pytest.fixture(scope="session")
def staff_auth(app_session, staff_user):
    return _login(app_session.test_client(), staff_user["email"], STAFF_PASSWORD)


@pytest.fixture
def staff_headers(staff_auth):
    return {"Authorization": f"Bearer {staff_auth['token']}"}


@pytest.fixture
def other_staff(app_session):
    return make_user(app_session, first_name="Olga", last_name="Other")


@pytest.fixture
def user_factory(app_session):
    def _make(**kwargs):
        return make_user(app_session, **kwargs)

    return _make


@pytest.fixture
def login(client):
    def _do(email, password):
        return _login(client, email, password)

    return _do


@pytest.fixture
def make_client(client, admin_headers):
    """Factory creating a client record over the API."""

    def _make(**overrides):
        body = {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "dateOfBirth": "1950-12-10",
            "email": "ada@example.com",
            "phoneNumber": "555-0100",
        }
        body.update(overrides)
        r = client.post("/api/Client", json=body, headers=admin_headers)
        assert r.status_code == 201, r.data
        return r.get_json()

    return _make
