from __future__ import annotations

from core.bootstrap import SAMPLE_ASSIGNMENTS, SAMPLE_FACULTY, seed_sample_data
from storage import MemoryStorage, SqlStorage
from storage.base import InvalidValueError


def test_health_reports_backend(anon_client, backend):
    r = anon_client.get("/health")
    assert r.status_code == 200
    expected = "memory" if backend == "memory" else "ok"
    assert r.json() == {"app": "ok", "database": expected}


def test_unknown_route_uses_message_shape(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"message": "Not Found"}


def test_malformed_path_id_is_400(client):
    r = client.get("/api/faculty/abc")
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "faculty_id"


def test_seed_sample_data_is_idempotent(storage):
    assert seed_sample_data(storage) is True
    assert seed_sample_data(storage) is False

    faculty = storage.list_faculty()
    assert len(faculty) == len(SAMPLE_FACULTY)
    assert storage.count_workload_assignments() == len(SAMPLE_ASSIGNMENTS)

    assigned = {a.faculty_id: 0 for a in storage.list_workload_assignments()}
    for a in storage.list_workload_assignments():
        assigned[a.faculty_id] += a.hours_per_week
    assert {f.id: f.current_hours for f in faculty if f.current_hours} == assigned


def test_storage_value_errors_are_400(client, monkeypatch):
    def reject(self, faculty_id, updates):
        raise InvalidValueError("maxHours must not be negative", field="maxHours")

    monkeypatch.setattr(MemoryStorage, "update_faculty", reject)
    monkeypatch.setattr(SqlStorage, "update_faculty", reject)

    r = client.patch("/api/faculty/1", json={"name": "X"})
    assert r.status_code == 400
    assert r.json() == {
        "message": "Invalid data",
        "errors": [{"field": "maxHours", "message": "maxHours must not be negative", "type": "value_error"}],
    }
