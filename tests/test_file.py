import os

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.file import File
from app.services import file_service
from app.services.blob_store import BlobStore


def upload(client, headers, name="hello.txt", content=b"hello world", content_type="text/plain"):
    return client.post("/file/upload", headers=headers, files={"file": (name, content, content_type)})


@pytest.fixture
def uploaded(client, auth_headers):
    resp = upload(client, auth_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_file_routes_require_token(client):
    assert client.get("/file/list").status_code == 403
    assert upload(client, {}).status_code == 403


def test_upload_creates_record_and_blob(client, auth_headers, blob_store, db_session):
    content = b"x" * 2048
    resp = upload(client, auth_headers, name="Report.PDF", content=content, content_type="application/pdf")
    assert resp.status_code == 200
    data = resp.json()["data"]

    assert data["originalName"] == "Report.PDF"
    assert data["extension"] == ".pdf"
    assert data["mimeType"] == "application/pdf"
    assert data["size"] == len(content)
    assert data["fileName"].startswith("file-")
    assert data["fileName"].endswith(".pdf")

    assert db_session.query(File).count() == 1
    blobs = os.listdir(blob_store.root)
    assert blobs == [data["fileName"]]
    assert os.path.getsize(blob_store.path_for(data["fileName"])) == data["size"]


def test_upload_without_file(client, auth_headers):
    resp = client.post("/file/upload", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "No file selected"


def test_upload_too_large(client, auth_headers, blob_store, db_session):
    resp = upload(client, auth_headers, content=b"0" * (blob_store.max_size + 1))
    assert resp.status_code == 400
    assert resp.json()["message"] == "File too large"
    assert db_session.query(File).count() == 0
    assert os.listdir(blob_store.root) == []


def test_get_file(client, auth_headers, uploaded):
    resp = client.get(f"/file/{uploaded['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["fileName"] == uploaded["fileName"]


def test_get_missing_file_returns_empty_data(client, auth_headers):
    resp = client.get("/file/9999", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "success"
    assert resp.json()["data"] is None


def test_list_pagination(client, auth_headers):
    ids = []
    for i in range(5):
        ids.append(upload(client, auth_headers, name=f"f{i}.txt").json()["data"]["id"])

    resp = client.get("/file/list", headers=auth_headers, params={"list_size": 2, "page": 2})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["page"] == 2
    assert data["listSize"] == 2
    assert data["totalRows"] == 5
    assert data["totalPages"] == 3
    assert [f["id"] for f in data["files"]] == ids[2:4]


def test_list_defaults_for_bad_params(client, auth_headers, uploaded):
    resp = client.get("/file/list", headers=auth_headers, params={"list_size": "abc", "page": "x"})
    data = resp.json()["data"]
    assert data["page"] == 1
    assert data["listSize"] == 10
    assert data["totalRows"] == 1


def test_update_replaces_blob(client, auth_headers, uploaded, blob_store, db_session):
    resp = client.put(
        f"/file/update/{uploaded['id']}",
        headers=auth_headers,
        files={"file": ("new.json", b'{"a": 1}', "application/json")},
    )
    assert resp.status_code == 200
    assert resp.json()["data"] == "File updated successfully"

    row = db_session.query(File).filter_by(id=uploaded["id"]).one()
    assert row.file_name != uploaded["fileName"]
    assert row.extension == ".json"
    assert row.mime_type == "application/json"
    assert row.size == len(b'{"a": 1}')
    assert row.original_name == uploaded["originalName"]

    assert not blob_store.exists(uploaded["fileName"])
    assert blob_store.exists(row.file_name)


def test_update_missing_record(client, auth_headers):
    resp = client.put("/file/update/9999", headers=auth_headers, files={"file": ("a.txt", b"a", "text/plain")})
    assert resp.status_code == 404


def test_update_without_file(client, auth_headers, uploaded):
    resp = client.put(f"/file/update/{uploaded['id']}", headers=auth_headers)
    assert resp.status_code == 400


def test_update_fails_when_blob_missing(client, auth_headers, uploaded, blob_store, db_session):
    os.remove(blob_store.path_for(uploaded["fileName"]))

    resp = client.put(
        f"/file/update/{uploaded['id']}",
        headers=auth_headers,
        files={"file": ("new.txt", b"new", "text/plain")},
    )
    assert resp.status_code == 404

    row = db_session.query(File).filter_by(id=uploaded["id"]).one()
    assert row.file_name == uploaded["fileName"]
    assert row.size == uploaded["size"]
    assert os.listdir(blob_store.root) == []


def test_delete_twice(client, auth_headers, uploaded, blob_store, db_session):
    resp = client.delete(f"/file/delete/{uploaded['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == "File deleted successfully"
    assert db_session.query(File).count() == 0
    assert not blob_store.exists(uploaded["fileName"])

    resp = client.delete(f"/file/delete/{uploaded['id']}", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "File not found"


def test_delete_refused_when_blob_missing(client, auth_headers, uploaded, blob_store, db_session):
    os.remove(blob_store.path_for(uploaded["fileName"]))

    resp = client.delete(f"/file/delete/{uploaded['id']}", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "File does not exist"
    assert db_session.query(File).count() == 1


def test_download(client, auth_headers, uploaded):
    resp = client.get(f"/file/download/{uploaded['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.content == b"hello world"
    assert "attachment" in resp.headers["content-disposition"]
    assert "hello.txt" in resp.headers["content-disposition"]


def test_download_missing(client, auth_headers, uploaded, blob_store):
    assert client.get("/file/download/9999", headers=auth_headers).status_code == 404

    os.remove(blob_store.path_for(uploaded["fileName"]))
    assert client.get(f"/file/download/{uploaded['id']}", headers=auth_headers).status_code == 404


def test_list_page_past_the_end(client, auth_headers, uploaded):
    resp = client.get("/file/list", headers=auth_headers, params={"list_size": 10, "page": "99999999999999999999"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["files"] == []
    assert data["totalRows"] == 1


def _failing_commit(self):
    raise SQLAlchemyError("database is gone")


def _failing_delete(self, file_name):
    raise PermissionError(file_name)


def test_upload_discards_blob_when_insert_fails(lenient_client, auth_headers, blob_store, db_session, monkeypatch):
    monkeypatch.setattr(Session, "commit", _failing_commit)

    resp = upload(lenient_client, auth_headers)
    assert resp.status_code == 500
    assert resp.json()["message"] == "Internal server error"

    assert db_session.query(File).count() == 0
    assert os.listdir(blob_store.root) == []


def test_update_keeps_old_blob_when_commit_fails(lenient_client, auth_headers, uploaded, blob_store, db_session, monkeypatch):
    monkeypatch.setattr(Session, "commit", _failing_commit)

    resp = lenient_client.put(
        f"/file/update/{uploaded['id']}",
        headers=auth_headers,
        files={"file": ("new.txt", b"new content", "text/plain")},
    )
    assert resp.status_code == 500

    row = db_session.query(File).filter_by(id=uploaded["id"]).one()
    assert row.file_name == uploaded["fileName"]
    assert row.size == uploaded["size"]
    assert os.listdir(blob_store.root) == [uploaded["fileName"]]


def test_update_rolls_forward_when_old_blob_delete_fails(client, auth_headers, uploaded, blob_store, db_session, monkeypatch):
    monkeypatch.setattr(BlobStore, "delete", _failing_delete)

    resp = client.put(
        f"/file/update/{uploaded['id']}",
        headers=auth_headers,
        files={"file": ("new.txt", b"new content", "text/plain")},
    )
    assert resp.status_code == 200

    row = db_session.query(File).filter_by(id=uploaded["id"]).one()
    assert row.file_name != uploaded["fileName"]
    assert row.size == len(b"new content")
    # 기존 원본은 남아 있지만 메타데이터는 새 원본을 가리킴
    assert sorted(os.listdir(blob_store.root)) == sorted([uploaded["fileName"], row.file_name])


def test_delete_rolls_back_when_blob_delete_fails(client, auth_headers, uploaded, blob_store, db_session, monkeypatch):
    monkeypatch.setattr(BlobStore, "delete", _failing_delete)

    resp = client.delete(f"/file/delete/{uploaded['id']}", headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json()["message"] == "File storage error"

    assert db_session.query(File).filter_by(id=uploaded["id"]).count() == 1
    assert blob_store.exists(uploaded["fileName"])


def test_unexpected_error_does_not_leak_details(lenient_client, auth_headers, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("secret connection string")

    monkeypatch.setattr(file_service, "list_files", explode)

    resp = lenient_client.get("/file/list", headers=auth_headers)
    assert resp.status_code == 500
    body = resp.json()
    assert body == {"status": "error", "message": "Internal server error", "data": None}
    assert "secret" not in resp.text
