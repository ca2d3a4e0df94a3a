import os
import sys
import uuid
import pathlib
import tempfile
import pytest

# --- Project root on sys.path and environment before the app is imported ---
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# SQLite file in a temp dir (stable across TestClient threads)
TEST_DIR = tempfile.mkdtemp(prefix="tasktracker_tests_")
DB_PATH = pathlib.Path(TEST_DIR) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production-0123456789"
os.environ.setdefault("APP_ENV", "test")

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

from tasktracker.database import Base, _make_engine
from tasktracker.main import app
from tasktracker import deps

# Same engine setup as the app, including SQLite foreign key enforcement
engine = _make_engine(os.environ["DATABASE_URL"])
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def _schema():
    """Create the schema once for the test session and drop it at the end."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db() -> Session:
    """One DB session per test."""
    s = TestingSessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(db: Session):
    """TestClient whose get_db yields the test session. Auth is NOT overridden."""
    def _get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[deps.get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def unique_credentials(prefix: str = "user") -> dict:
    tag = uuid.uuid4().hex[:8]
    return {
        "email": f"{prefix}_{tag}@example.com",
        "password": "secret1",
        "username": f"{prefix}_{tag}",
    }


@pytest.fixture()
def register(client):
    """Register a fresh user; returns the response body ``{token, user}``."""
    def _make(**overrides):
        payload = {**unique_credentials(), **overrides}
        r = client.post("/auth/register", json=payload)
        assert r.status_code == 201, r.text
        return r.json()
    return _make


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers(register):
    """Headers for a freshly registered user."""
    return bearer(register()["token"])


@pytest.fixture()
def api_create(client, auth_headers):
    """Create tasks concisely as the ``auth_headers`` user."""
    def _make(title: str, **fields):
        r = client.post("/tasks", json={"title": title, **fields}, headers=auth_headers)
        assert r.status_code == 201, r.text
        return r.json()
    return _make
