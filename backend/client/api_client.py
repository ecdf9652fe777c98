"""Thin data layer over the REST API.

GET responses are cached per (path, query params) for the lifetime of the
client. Every mutation drops the cache entries of the resources it can
affect, so a later read goes back to the server.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx


logger = logging.getLogger(__name__)


FACULTY = "/api/faculty"
SUBJECTS = "/api/subjects"
DIVISIONS = "/api/divisions"
WORKLOAD_ASSIGNMENTS = "/api/workload-assignments"
TIMETABLE = "/api/timetable"
EXCEL_UPLOADS = "/api/excel-uploads"
DASHBOARD = "/api/dashboard"


# Resource prefix -> prefixes whose cached reads a mutation on it makes stale.
INVALIDATES: dict[str, tuple[str, ...]] = {
    # Assignment and timetable listings embed faculty, subject and division rows.
    FACULTY: (FACULTY, WORKLOAD_ASSIGNMENTS, TIMETABLE, DASHBOARD),
    SUBJECTS: (SUBJECTS, WORKLOAD_ASSIGNMENTS, TIMETABLE, DASHBOARD),
    DIVISIONS: (DIVISIONS, WORKLOAD_ASSIGNMENTS, TIMETABLE),
    WORKLOAD_ASSIGNMENTS: (WORKLOAD_ASSIGNMENTS, FACULTY, DASHBOARD),
    TIMETABLE: (TIMETABLE,),
    EXCEL_UPLOADS: (EXCEL_UPLOADS, FACULTY, DASHBOARD),
}

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


CacheKey = tuple[str, tuple[tuple[str, str], ...]]


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


def _cache_key(path: str, params: dict[str, Any] | None) -> CacheKey:
    items = sorted((str(k), str(v)) for k, v in (params or {}).items() if v is not None)
    return path, tuple(items)


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    cleaned = {k: v for k, v in params.items() if v is not None}
    return cleaned or None


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = str(body.get("message") or body.get("detail") or response.reason_phrase)
        errors = body.get("errors") if isinstance(body.get("errors"), list) else []
    else:
        message = response.text or response.reason_phrase
        errors = []
    return ApiError(response.status_code, message, errors)


class CollegeApiClient:
    """Cached client for the college administration API.

    ``http`` is anything with the ``httpx.Client`` API whose base URL points
    at the server, including ``fastapi.testclient.TestClient``.
    """

    def __init__(self, http: httpx.Client):
        self.http = http
        self._cache: dict[CacheKey, Any] = {}

    # Core

    def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self.http.request(method, path, **kwargs)
        if response.status_code >= 400:
            error = _error_from_response(response)
            logger.debug("%s %s failed status=%s message=%s", method, path, error.status_code, error.message)
            raise error
        if not response.content:
            return None
        return response.json()

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        key = _cache_key(path, params)
        if key in self._cache:
            return self._cache[key]
        data = self._send("GET", path, params=_clean_params(params))
        self._cache[key] = data
        return data

    def mutate(
        self,
        method: str,
        path: str,
        *,
        resource: str,
        json: Any = None,
        files: Any = None,
    ) -> Any:
        kwargs: dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if files is not None:
            kwargs["files"] = files
        try:
            return self._send(method, path, **kwargs)
        finally:
            # Also on failure: the write may still have been applied.
            self.invalidate(*INVALIDATES.get(resource, (resource,)))

    def invalidate(self, *prefixes: str) -> int:
        stale = [key for key in self._cache if any(key[0].startswith(p) for p in prefixes)]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.debug("Invalidated %d cached responses prefixes=%s", len(stale), prefixes)
        return len(stale)

    def clear_cache(self) -> None:
        self._cache.clear()

    def cached_paths(self) -> list[str]:
        return sorted({path for path, _params in self._cache})

    # Auth

    def login(self, pin: str) -> dict:
        data = self._send("POST", "/api/auth/login", json={"pin": pin})
        token = data.get("accessToken") if isinstance(data, dict) else None
        if token:
            self.http.headers["Authorization"] = f"Bearer {token}"
        self.clear_cache()
        return data

    def logout(self) -> None:
        self._send("POST", "/api/auth/logout")
        self.http.headers.pop("Authorization", None)
        self.clear_cache()

    # Dashboard

    def dashboard_stats(self) -> dict:
        return self.get(f"{DASHBOARD}/stats")

    def workload_overview(self, department: str | None = None) -> list[dict]:
        return self.get(f"{DASHBOARD}/workload", {"department": department})

    # Faculty

    def list_faculty(self, department: str | None = None) -> list[dict]:
        return self.get(FACULTY, {"department": department})

    def get_faculty(self, faculty_id: int) -> dict:
        return self.get(f"{FACULTY}/{faculty_id}")

    def create_faculty(self, payload: dict) -> dict:
        return self.mutate("POST", FACULTY, resource=FACULTY, json=payload)

    def update_faculty(self, faculty_id: int, payload: dict) -> dict:
        return self.mutate("PATCH", f"{FACULTY}/{faculty_id}", resource=FACULTY, json=payload)

    def delete_faculty(self, faculty_id: int) -> dict:
        return self.mutate("DELETE", f"{FACULTY}/{faculty_id}", resource=FACULTY)

    # Subjects

    def list_subjects(self, department: str | None = None) -> list[dict]:
        return self.get(SUBJECTS, {"department": department})

    def create_subject(self, payload: dict) -> dict:
        return self.mutate("POST", SUBJECTS, resource=SUBJECTS, json=payload)

    def update_subject(self, subject_id: int, payload: dict) -> dict:
        return self.mutate("PATCH", f"{SUBJECTS}/{subject_id}", resource=SUBJECTS, json=payload)

    def delete_subject(self, subject_id: int) -> dict:
        return self.mutate("DELETE", f"{SUBJECTS}/{subject_id}", resource=SUBJECTS)

    # Divisions

    def list_divisions(self, department: str | None = None) -> list[dict]:
        return self.get(DIVISIONS, {"department": department})

    def create_division(self, payload: dict) -> dict:
        return self.mutate("POST", DIVISIONS, resource=DIVISIONS, json=payload)

    def update_division(self, division_id: int, payload: dict) -> dict:
        return self.mutate("PATCH", f"{DIVISIONS}/{division_id}", resource=DIVISIONS, json=payload)

    def delete_division(self, division_id: int) -> dict:
        return self.mutate("DELETE", f"{DIVISIONS}/{division_id}", resource=DIVISIONS)

    # Workload assignments

    def list_workload_assignments(self, faculty_id: int | None = None) -> list[dict]:
        return self.get(WORKLOAD_ASSIGNMENTS, {"facultyId": faculty_id})

    def create_workload_assignment(self, payload: dict) -> dict:
        return self.mutate("POST", WORKLOAD_ASSIGNMENTS, resource=WORKLOAD_ASSIGNMENTS, json=payload)

    def update_workload_assignment_status(self, assignment_id: int, status: str) -> dict:
        return self.mutate(
            "PATCH",
            f"{WORKLOAD_ASSIGNMENTS}/{assignment_id}/status",
            resource=WORKLOAD_ASSIGNMENTS,
            json={"status": status},
        )

    def delete_workload_assignment(self, assignment_id: int) -> dict:
        return self.mutate("DELETE", f"{WORKLOAD_ASSIGNMENTS}/{assignment_id}", resource=WORKLOAD_ASSIGNMENTS)

    # Timetable

    def list_timetable(self, division_id: int | None = None, faculty_id: int | None = None) -> list[dict]:
        return self.get(TIMETABLE, {"divisionId": division_id, "facultyId": faculty_id})

    def create_timetable_slot(self, payload: dict) -> dict:
        return self.mutate("POST", TIMETABLE, resource=TIMETABLE, json=payload)

    def update_timetable_slot(self, slot_id: int, payload: dict) -> dict:
        return self.mutate("PATCH", f"{TIMETABLE}/{slot_id}", resource=TIMETABLE, json=payload)

    def delete_timetable_slot(self, slot_id: int) -> dict:
        return self.mutate("DELETE", f"{TIMETABLE}/{slot_id}", resource=TIMETABLE)

    # Excel uploads

    def list_excel_uploads(self, include_deleted: bool = False) -> list[dict]:
        params = {"includeDeleted": "true"} if include_deleted else None
        return self.get(EXCEL_UPLOADS, params)

    def create_excel_upload(self, filename: str, original_name: str, file_size: int) -> dict:
        payload = {"filename": filename, "originalName": original_name, "fileSize": file_size}
        return self.mutate("POST", EXCEL_UPLOADS, resource=EXCEL_UPLOADS, json=payload)

    def upload_roster(self, path: str | Path) -> dict:
        path = Path(path)
        with path.open("rb") as fh:
            files = {"file": (path.name, fh, XLSX_MEDIA_TYPE)}
            return self.mutate("POST", f"{EXCEL_UPLOADS}/file", resource=EXCEL_UPLOADS, files=files)

    def update_excel_upload_status(
        self,
        upload_id: int,
        status: str,
        processed_rows: int | None = None,
        total_rows: int | None = None,
    ) -> dict:
        payload: dict[str, Any] = {"status": status}
        if processed_rows is not None:
            payload["processedRows"] = processed_rows
        if total_rows is not None:
            payload["totalRows"] = total_rows
        return self.mutate("PATCH", f"{EXCEL_UPLOADS}/{upload_id}/status", resource=EXCEL_UPLOADS, json=payload)

    def delete_excel_upload(self, upload_id: int) -> dict:
        return self.mutate("DELETE", f"{EXCEL_UPLOADS}/{upload_id}", resource=EXCEL_UPLOADS)

