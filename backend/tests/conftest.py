from __future__ import annotations

import os

# Settings are read at import time; pin them before the app is imported.
os.environ["ADMIN_PIN"] = "2468"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["AUTH_ENABLED"] = "true"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["ENVIRONMENT"] = "test"

from typing import Any, Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from api.routes.auth import reset_login_rate_limit
from core.config import settings
from core.database import ENGINE
from core.security import create_access_token
from main import app
from models.base import Base
from storage import Storage, get_memory_storage, storage_session


@pytest.fixture(params=["memory", "sql"])
def backend(request, monkeypatch) -> Iterator[str]:
    monkeypatch.setattr(settings, "storage_backend", request.param)
    if request.param == "sql":
        Base.metadata.drop_all(ENGINE)
        Base.metadata.create_all(ENGINE)
        yield "sql"
        Base.metadata.drop_all(ENGINE)
    else:
        get_memory_storage().reset()
        yield "memory"


@pytest.fixture
def storage(backend) -> Iterator[Storage]:
    with storage_session() as s:
        yield s


@pytest.fixture(autouse=True)
def _fresh_login_limiter() -> None:
    reset_login_rate_limit()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", path)
    return path


@pytest.fixture
def anon_client(backend, upload_dir) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def client(anon_client) -> TestClient:
    anon_client.headers["Authorization"] = f"Bearer {create_access_token()}"
    return anon_client


@pytest.fixture
def make_faculty(client) -> Callable[..., dict[str, Any]]:
    counter = {"n": 0}

    def _make(**overrides: Any) -> dict[str, Any]:
        counter["n"] += 1
        payload = {
            "name": f"Faculty {counter['n']}",
            "email": f"faculty{counter['n']}@college.edu",
            "position": "professor",
            "department": "Computer Science",
        }
        payload.update(overrides)
        r = client.post("/api/faculty", json=payload)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def make_subject(client) -> Callable[..., dict[str, Any]]:
    counter = {"n": 0}

    def _make(**overrides: Any) -> dict[str, Any]:
        counter["n"] += 1
        payload = {
            "name": f"Subject {counter['n']}",
            "code": f"CS{100 + counter['n']}",
            "department": "Computer Science",
            "credits": 3,
            "semester": 5,
        }
        payload.update(overrides)
        r = client.post("/api/subjects", json=payload)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def make_division(client) -> Callable[..., dict[str, Any]]:
    counter = {"n": 0}

    def _make(**overrides: Any) -> dict[str, Any]:
        counter["n"] += 1
        payload = {
            "name": f"Division {counter['n']}",
            "code": f"CE-{counter['n']}",
            "department": "Computer Science",
            "semester": 5,
            "academicYear": "2024-25",
            "studentCount": 60,
        }
        payload.update(overrides)
        r = client.post("/api/divisions", json=payload)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def assignment_refs(make_faculty, make_subject, make_division) -> dict[str, dict[str, Any]]:
    """One faculty (professor), one subject and one division to hang assignments on."""

    return {
        "faculty": make_faculty(),
        "subject": make_subject(),
        "division": make_division(),
    }
