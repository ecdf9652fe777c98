from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import Workbook

from services.excel_import import (
    RosterImportError,
    import_faculty_roster,
    iter_roster_rows,
    normalize_header,
    normalize_position,
    run_roster_import,
    stored_filename,
)
from storage import MemoryStorage, SqlStorage
from storage.base import DuplicateKeyError

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _workbook(path: Path, rows: list[list[object]]) -> Path:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


ROSTER = [
    ["Name", "Email", "Designation", "Dept"],
    ["Dr. Sunita Rao", "sunita.rao@college.edu", "Professor", "Mathematics"],
    ["Prof. Vikram Singh", "vikram.singh@college.edu", "Associate Professor", "Physics"],
    [" ", None, None, None],
    ["Dr. Amit Patel", "amit.patel@college.edu", "asst prof", "Computer Science"],
    ["Bad Row", "no-at-sign", "Professor", "Physics"],
    ["Dup", "sunita.rao@college.edu", "Professor", "Mathematics"],
]


def test_header_and_position_normalization():
    assert normalize_header(" E-mail ") == "email"
    assert normalize_header("Faculty Name") == "name"
    assert normalize_header("DEPARTMENT") == "department"
    assert normalize_position("Associate Professor") == "associate_professor"
    assert normalize_position("Asst. Prof") == "assistant_professor"
    assert normalize_position("professor") == "professor"


def test_stored_filename_is_prefixed_and_sanitized():
    name = stored_filename("../faculty roster (v2).xlsx")
    prefix, rest = name.split("_", 1)
    assert prefix.isdigit()
    assert rest == "faculty_roster_v2_.xlsx"


def test_iter_rows_skips_blank_rows(tmp_path):
    path = _workbook(tmp_path / "roster.xlsx", ROSTER)
    rows = list(iter_roster_rows(path))
    assert [n for n, _ in rows] == [2, 3, 5, 6, 7]
    assert rows[0][1]["email"] == "sunita.rao@college.edu"


def test_missing_columns_raise(tmp_path):
    path = _workbook(tmp_path / "bad.xlsx", [["Name", "Email"], ["A", "a@college.edu"]])
    with pytest.raises(RosterImportError, match="position, department"):
        list(iter_roster_rows(path))


def test_unreadable_file_raises(tmp_path):
    path = tmp_path / "junk.xlsx"
    path.write_bytes(b"this is not a zip archive")
    with pytest.raises(RosterImportError):
        list(iter_roster_rows(path))


def test_import_creates_valid_rows_and_skips_the_rest(storage, tmp_path):
    path = _workbook(tmp_path / "roster.xlsx", ROSTER)
    result = import_faculty_roster(storage, path)

    assert result.total_rows == 5
    assert result.imported_rows == 3
    assert sorted(s.row_number for s in result.skipped) == [6, 7]

    by_email = {f.email: f for f in storage.list_faculty()}
    assert by_email["vikram.singh@college.edu"].max_hours == 16
    assert by_email["amit.patel@college.edu"].position == "assistant_professor"
    assert all(f.current_hours == 0 for f in by_email.values())


def test_upload_endpoint_runs_import(client, tmp_path, upload_dir):
    path = _workbook(tmp_path / "roster.xlsx", ROSTER)
    with path.open("rb") as fh:
        r = client.post("/api/excel-uploads/file", files={"file": ("roster.xlsx", fh, XLSX)})
    assert r.status_code == 201, r.text
    upload = r.json()
    assert upload["originalName"] == "roster.xlsx"
    assert upload["fileSize"] == path.stat().st_size
    assert upload["filename"].endswith("_roster.xlsx")
    assert (upload_dir / upload["filename"]).exists()

    # TestClient runs background tasks before handing back the response.
    listed = client.get("/api/excel-uploads").json()
    assert len(listed) == 1
    assert listed[0]["status"] == "completed"
    assert (listed[0]["processedRows"], listed[0]["totalRows"]) == (3, 5)
    assert len(client.get("/api/faculty").json()) == 3


def test_upload_with_missing_columns_ends_in_error(client, tmp_path):
    path = _workbook(tmp_path / "roster.xlsx", [["Name", "Email"], ["A", "a@college.edu"]])
    with path.open("rb") as fh:
        client.post("/api/excel-uploads/file", files={"file": ("roster.xlsx", fh, XLSX)})

    upload = client.get("/api/excel-uploads").json()[0]
    assert upload["status"] == "error"
    assert "Missing required columns" in upload["errorMessage"]


def test_non_xlsx_upload_is_rejected(client):
    r = client.post("/api/excel-uploads/file", files={"file": ("roster.csv", b"name,email\n", "text/csv")})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "file"
    assert client.get("/api/excel-uploads").json() == []


def test_oversized_upload_is_rejected(client, monkeypatch, upload_dir):
    from core.config import settings

    monkeypatch.setattr(settings, "max_upload_bytes", 10)
    r = client.post("/api/excel-uploads/file", files={"file": ("big.xlsx", b"x" * 64, XLSX)})
    assert r.status_code == 413
    assert list(upload_dir.iterdir()) == []


def test_metadata_create_status_patch_and_soft_delete(client):
    r = client.post(
        "/api/excel-uploads",
        json={"filename": "1700000000000_roster.xlsx", "originalName": "roster.xlsx", "fileSize": 4096},
    )
    assert r.status_code == 201
    upload = r.json()
    assert (upload["status"], upload["processedRows"], upload["totalRows"]) == ("processing", 0, 0)
    assert upload["uploadedAt"]

    r = client.patch(
        f"/api/excel-uploads/{upload['id']}/status",
        json={"status": "completed", "processedRows": 40, "totalRows": 42},
    )
    assert r.status_code == 200
    assert (r.json()["processedRows"], r.json()["totalRows"]) == (40, 42)

    r = client.delete(f"/api/excel-uploads/{upload['id']}")
    assert r.json() == {"message": "Upload deleted successfully"}
    assert client.get("/api/excel-uploads").json() == []

    hidden = client.get("/api/excel-uploads", params={"includeDeleted": "true"}).json()
    assert [(u["id"], u["status"]) for u in hidden] == [(upload["id"], "deleted")]


def test_missing_upload_is_404(client):
    assert client.patch("/api/excel-uploads/77/status", json={"status": "error"}).status_code == 404
    assert client.delete("/api/excel-uploads/77").status_code == 404


def test_delete_during_import_stays_deleted(client, tmp_path):
    path = _workbook(tmp_path / "roster.xlsx", ROSTER)
    upload = client.post(
        "/api/excel-uploads",
        json={"filename": "1700000000000_roster.xlsx", "originalName": "roster.xlsx", "fileSize": 4096},
    ).json()
    assert client.delete(f"/api/excel-uploads/{upload['id']}").status_code == 200

    # The job finishes after the delete went through.
    run_roster_import(upload["id"], path)

    assert client.get("/api/excel-uploads").json() == []
    hidden = client.get("/api/excel-uploads", params={"includeDeleted": "true"}).json()
    assert [(u["status"], u["processedRows"]) for u in hidden] == [("deleted", 0)]


def test_failed_upload_row_removes_stored_workbook(client, tmp_path, monkeypatch, upload_dir):
    def refuse(self, data):
        raise DuplicateKeyError("excel upload already exists")

    monkeypatch.setattr(MemoryStorage, "create_excel_upload", refuse)
    monkeypatch.setattr(SqlStorage, "create_excel_upload", refuse)

    path = _workbook(tmp_path / "roster.xlsx", ROSTER)
    with path.open("rb") as fh:
        r = client.post("/api/excel-uploads/file", files={"file": ("roster.xlsx", fh, XLSX)})
    assert r.status_code == 409
    assert list(upload_dir.iterdir()) == []
