import io

import pytest

from careportal.file_upload_service import FileUploadService, FileValidationError, normalize_upload_type


def _upload(client, headers, *, name="note.pdf", payload=b"%PDF-1.4 hello", upload_type="document"):
    return client.post(
        f"/api/File/upload?uploadType={upload_type}",
        data={"file": (io.BytesIO(payload), name)},
        headers=headers,
        content_type="multipart/form-data",
    )


def test_normalize_upload_type():
    assert normalize_upload_type(None) == "document"
    assert normalize_upload_type(" Incident ") == "incident"
    assert normalize_upload_type("avatar") is None


def test_upload_download_delete_cycle(client, admin_headers):
    r = _upload(client, admin_headers, name="Scan.PNG", payload=b"\x89PNG data", upload_type="incident")
    assert r.status_code == 200, r.data
    info = r.get_json()
    assert info["originalFileName"] == "Scan.PNG"
    assert info["fileType"] == ".png"
    assert info["fileSize"] == len(b"\x89PNG data")
    assert info["uploadType"] == "incident"
    stored = info["fileName"]
    assert stored.endswith(".png") and stored != "Scan.PNG"

    r = client.get(f"/api/File/download?fileName={stored}&uploadType=incident", headers=admin_headers)
    assert r.status_code == 200
    assert r.mimetype == "image/png"
    assert r.data == b"\x89PNG data"
    assert "attachment" in r.headers["Content-Disposition"]

    # Stored under the incident folder only
    r = client.get(f"/api/File/download?fileName={stored}&uploadType=document", headers=admin_headers)
    assert r.status_code == 404
    assert r.get_json()["error"] == "document file not found"

    assert client.delete(f"/api/File/{stored}?uploadType=incident", headers=admin_headers).status_code == 204
    assert client.delete(f"/api/File/{stored}?uploadType=incident", headers=admin_headers).status_code == 404


def test_uploaded_file_served_under_base_url(client, admin_headers):
    stored = _upload(client, admin_headers).get_json()["fileName"]
    assert client.get(f"/uploads/documents/{stored}").status_code == 401
    r = client.get(f"/uploads/documents/{stored}", headers=admin_headers)
    assert r.status_code == 200
    assert r.data == b"%PDF-1.4 hello"
    assert client.get(f"/uploads/avatars/{stored}", headers=admin_headers).status_code == 404


def test_invalid_upload_type(client, admin_headers):
    r = _upload(client, admin_headers, upload_type="avatar")
    assert r.status_code == 400
    assert "Invalid upload type" in r.get_json()["error"]


def test_upload_rejects_extension(client, admin_headers):
    r = _upload(client, admin_headers, name="script.sh", payload=b"echo hi")
    assert r.status_code == 400
    assert r.get_json()["error"].startswith("Invalid file type. Allowed types:")


def test_upload_requires_file(client, admin_headers):
    r = client.post("/api/File/upload", data={}, headers=admin_headers, content_type="multipart/form-data")
    assert r.status_code == 400
    assert r.get_json()["error"] == "File is required"


def test_upload_size_limit(client, admin_headers):
    # Configured limit is 1MB; werkzeug allows slightly more so the service check answers
    payload = b"x" * (1024 * 1024 + 10)
    r = _upload(client, admin_headers, name="big.pdf", payload=payload)
    assert r.status_code == 400
    assert r.get_json()["error"] == "File size too large. Maximum size is 1MB."


def test_download_rejects_traversal(client, admin_headers):
    r = client.get("/api/File/download?fileName=../../etc/passwd&uploadType=document", headers=admin_headers)
    assert r.status_code == 404


def test_file_endpoints_admin_only(client, staff_headers):
    assert _upload(client, staff_headers).status_code == 403


def test_service_validate_and_paths(tmp_path):
    from werkzeug.datastructures import FileStorage

    svc = FileUploadService(
        document_path=str(tmp_path / "docs"),
        incident_path=str(tmp_path / "inc"),
        base_url="/files/",
        max_file_size_mb=1,
        allowed_extensions=[".pdf"],
    )
    assert (tmp_path / "docs").is_dir() and (tmp_path / "inc").is_dir()
    assert svc.file_url("a.pdf", "incident") == "/files/incidents/a.pdf"
    assert svc.full_path("..", "document") is None
    assert svc.full_path("sub/a.pdf", "document") is None

    with pytest.raises(FileValidationError, match="File is required"):
        svc.validate(None)
    with pytest.raises(FileValidationError, match="File is required"):
        svc.upload_file(None, "document")
    with pytest.raises(FileValidationError, match="Allowed types: .pdf"):
        svc.validate(FileStorage(stream=io.BytesIO(b"x"), filename="a.txt"))

    stored = svc.upload_file(FileStorage(stream=io.BytesIO(b"pdf"), filename="a.PDF"), "document")
    assert svc.file_exists(stored)
    assert svc.delete_any(stored) is True
    assert svc.file_exists(stored) is False
