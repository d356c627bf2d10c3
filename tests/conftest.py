"""Pytest fixtures for API and pipeline tests.

Environment is set before videohub is imported: settings are read once per
process (get_settings is cached) and the module-level app is built on import.
Every test gets freshly created tables in a throwaway SQLite file.
"""
import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="videohub-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["VIDEO_UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("VERCEL", None)
os.environ.pop("AWS_LAMBDA_FUNCTION_NAME", None)

import pytest
from fastapi.testclient import TestClient

from videohub.database import Base, database
from videohub.main import create_app
from videohub.services.storage import StorageBackend, StoredFile
import videohub.models  # noqa: F401 - register tables


class FakeStorage(StorageBackend):
    """Records calls; returns a predictable URL or raises the configured error."""

    name = "fake"

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple[bytes, str, str]] = []
        self.discarded: list[str] = []

    async def store(self, data: bytes, original_name: str, content_type: str) -> StoredFile:
        self.calls.append((data, original_name, content_type))
        if self.error is not None:
            raise self.error
        n = len(self.calls)
        return StoredFile(url=f"https://cdn.example.com/videos/{n}-{original_name}", stored_name=f"{n}-{original_name}")

    async def discard(self, stored_name: str) -> None:
        self.discarded.append(stored_name)


@pytest.fixture(autouse=True)
def tables():
    database.create_all()
    yield
    Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def db_session():
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def client(storage: FakeStorage) -> TestClient:
    return TestClient(create_app(storage_backend=storage))


@pytest.fixture
def register_and_login(client: TestClient):
    """Register an account and return its bearer headers."""

    def _go(name: str = "A", email: str = "a@x.com", password: str = "p1") -> dict:
        resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _go


@pytest.fixture
def auth_headers(register_and_login) -> dict:
    return register_and_login()
