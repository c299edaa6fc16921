import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base_models import Base
from app.dependencies.db import get_db
from app.dependencies.storage import get_blob_store
from app.services.blob_store import BlobStore

TEST_PASSWORD = "testpassword123!"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def blob_store(tmp_path):
    return BlobStore(str(tmp_path / "uploads"), 1_000_000)


@pytest.fixture
def client(engine, blob_store):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def lenient_client(client):
    """ 처리되지 않은 예외도 500 응답으로 받기 위한 client (dependency override는 client와 공유) """
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def user(client):
    email = f"user_{uuid.uuid4().hex[:8]}@mail.com"
    resp = client.post("/auth/signup", json={"email": email, "password": TEST_PASSWORD})
    assert resp.status_code == 201
    return resp.json()["data"]


@pytest.fixture
def signin(client):
    def _signin(email, device_id="device-1", password=TEST_PASSWORD):
        resp = client.post("/auth/signin", json={
            "email": email,
            "password": password,
            "deviceId": device_id,
        })
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]
    return _signin


@pytest.fixture
def tokens(user, signin):
    return signin(user["email"])


@pytest.fixture
def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['accessToken']}"}
