from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

from pydantic import BaseModel

from schemas.division import DivisionOut
from schemas.excel_upload import ExcelUploadOut
from schemas.faculty import FacultyOut
from schemas.subject import SubjectOut
from schemas.timetable import TimetableSlotDetail, TimetableSlotOut
from schemas.workload import FacultyWithWorkload, WorkloadAssignmentDetail, WorkloadAssignmentOut
from storage.base import DuplicateKeyError, InUseError, Storage, check_faculty_hours, upload_status_updates


M = TypeVar("M", bound=BaseModel)


class MemoryStorage(Storage):
    """Dict-backed repository for tests and demos.

    Every public method runs under one re-entrant lock, which makes the
    assignment + faculty-hours bookkeeping a single critical section.
    Stored models are never handed out directly; callers get copies.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._faculty: dict[int, FacultyOut] = {}
            self._subjects: dict[int, SubjectOut] = {}
            self._divisions: dict[int, DivisionOut] = {}
            self._assignments: dict[int, WorkloadAssignmentOut] = {}
            self._slots: dict[int, TimetableSlotOut] = {}
            self._uploads: dict[int, ExcelUploadOut] = {}
            self._ids = {
                name: itertools.count(1)
                for name in ("faculty", "subjects", "divisions", "assignments", "slots", "uploads")
            }

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    @staticmethod
    def _ensure_unique(
        rows: dict[int, M],
        field: str,
        value: Any,
        *,
        exclude_id: int | None,
        what: str,
    ) -> None:
        if value is None:
            return
        for row_id, row in rows.items():
            if row_id != exclude_id and getattr(row, field) == value:
                raise DuplicateKeyError(f"{what} already exists")

    @staticmethod
    def _filtered(rows: dict[int, M], pred: Callable[[M], bool] | None = None) -> list[M]:
        return [r.model_copy() for _, r in sorted(rows.items()) if pred is None or pred(r)]

    def _update(self, rows: dict[int, M], row_id: int, updates: dict[str, Any]) -> M | None:
        current = rows.get(row_id)
        if current is None:
            return None
        updated = current.model_copy(update=updates)
        rows[row_id] = updated
        return updated.model_copy()

    def _is_referenced(self, field: str, value: int) -> bool:
        return any(getattr(a, field) == value for a in self._assignments.values()) or any(
            getattr(s, field) == value for s in self._slots.values()
        )

    def _joined(self, row: WorkloadAssignmentOut | TimetableSlotOut, detail_cls: type[M]) -> M:
        faculty = self._faculty.get(row.faculty_id)
        subject = self._subjects.get(row.subject_id)
        division = self._divisions.get(row.division_id)
        return detail_cls(
            **row.model_dump(),
            faculty=faculty.model_copy() if faculty is not None else None,
            subject=subject.model_copy() if subject is not None else None,
            division=division.model_copy() if division is not None else None,
        )

    # Faculty

    def list_faculty(self, department: str | None = None) -> list[FacultyOut]:
        with self._lock:
            if department is None:
                return self._filtered(self._faculty)
            return self._filtered(self._faculty, lambda f: f.department == department)

    def get_faculty(self, faculty_id: int) -> FacultyOut | None:
        with self._lock:
            row = self._faculty.get(faculty_id)
            return row.model_copy() if row is not None else None

    def get_faculty_with_workload(self, faculty_id: int) -> FacultyWithWorkload | None:
        with self._lock:
            row = self._faculty.get(faculty_id)
            if row is None:
                return None
            return FacultyWithWorkload(
                **row.model_dump(),
                assignments=self.list_workload_assignments(faculty_id=faculty_id),
            )

    def create_faculty(self, data: dict[str, Any]) -> FacultyOut:
        check_faculty_hours(data)
        with self._lock:
            self._ensure_unique(self._faculty, "email", data.get("email"), exclude_id=None, what="faculty email")
            row = FacultyOut(**data, id=self._next_id("faculty"), current_hours=0)
            self._faculty[row.id] = row
            return row.model_copy()

    def update_faculty(self, faculty_id: int, updates: dict[str, Any]) -> FacultyOut | None:
        check_faculty_hours(updates)
        with self._lock:
            if "email" in updates:
                self._ensure_unique(
                    self._faculty, "email", updates["email"], exclude_id=faculty_id, what="faculty email"
                )
            return self._update(self._faculty, faculty_id, updates)

    def update_faculty_workload(self, faculty_id: int, hours: int) -> FacultyOut | None:
        check_faculty_hours({"current_hours": int(hours)})
        with self._lock:
            return self._update(self._faculty, faculty_id, {"current_hours": int(hours)})

    def delete_faculty(self, faculty_id: int) -> bool:
        with self._lock:
            if faculty_id not in self._faculty:
                return False
            if self._is_referenced("faculty_id", faculty_id):
                raise InUseError("Faculty still has workload assignments or timetable slots")
            del self._faculty[faculty_id]
            return True

    # Subjects

    def list_subjects(self, department: str | None = None) -> list[SubjectOut]:
        with self._lock:
            if department is None:
                return self._filtered(self._subjects)
            return self._filtered(self._subjects, lambda s: s.department == department)

    def get_subject(self, subject_id: int) -> SubjectOut | None:
        with self._lock:
            row = self._subjects.get(subject_id)
            return row.model_copy() if row is not None else None

    def create_subject(self, data: dict[str, Any]) -> SubjectOut:
        with self._lock:
            self._ensure_unique(self._subjects, "code", data.get("code"), exclude_id=None, what="subject code")
            row = SubjectOut(**data, id=self._next_id("subjects"))
            self._subjects[row.id] = row
            return row.model_copy()

    def update_subject(self, subject_id: int, updates: dict[str, Any]) -> SubjectOut | None:
        with self._lock:
            if "code" in updates:
                self._ensure_unique(
                    self._subjects, "code", updates["code"], exclude_id=subject_id, what="subject code"
                )
            return self._update(self._subjects, subject_id, updates)

    def delete_subject(self, subject_id: int) -> bool:
        with self._lock:
            if subject_id not in self._subjects:
                return False
            if self._is_referenced("subject_id", subject_id):
                raise InUseError("Subject still has workload assignments or timetable slots")
            del self._subjects[subject_id]
            return True

    def count_subjects(self) -> int:
        with self._lock:
            return len(self._subjects)

    # Divisions

    def list_divisions(self, department: str | None = None) -> list[DivisionOut]:
        with self._lock:
            if department is None:
                return self._filtered(self._divisions)
            return self._filtered(self._divisions, lambda d: d.department == department)

    def get_division(self, division_id: int) -> DivisionOut | None:
        with self._lock:
            row = self._divisions.get(division_id)
            return row.model_copy() if row is not None else None

    def create_division(self, data: dict[str, Any]) -> DivisionOut:
        with self._lock:
            self._ensure_unique(self._divisions, "code", data.get("code"), exclude_id=None, what="division code")
            row = DivisionOut(**data, id=self._next_id("divisions"))
            self._divisions[row.id] = row
            return row.model_copy()

    def update_division(self, division_id: int, updates: dict[str, Any]) -> DivisionOut | None:
        with self._lock:
            if "code" in updates:
                self._ensure_unique(
                    self._divisions, "code", updates["code"], exclude_id=division_id, what="division code"
                )
            return self._update(self._divisions, division_id, updates)

    def delete_division(self, division_id: int) -> bool:
        with self._lock:
            if division_id not in self._divisions:
                return False
            if self._is_referenced("division_id", division_id):
                raise InUseError("Division still has workload assignments or timetable slots")
            del self._divisions[division_id]
            return True

    # Workload assignments

    def list_workload_assignments(self, faculty_id: int | None = None) -> list[WorkloadAssignmentDetail]:
        with self._lock:
            return [
                self._joined(a, WorkloadAssignmentDetail)
                for _, a in sorted(self._assignments.items())
                if faculty_id is None or a.faculty_id == faculty_id
            ]

    def get_workload_assignment(self, assignment_id: int) -> WorkloadAssignmentDetail | None:
        with self._lock:
            row = self._assignments.get(assignment_id)
            return self._joined(row, WorkloadAssignmentDetail) if row is not None else None

    def create_workload_assignment(self, data: dict[str, Any]) -> WorkloadAssignmentOut:
        with self._lock:
            row = WorkloadAssignmentOut(**data, id=self._next_id("assignments"), status="assigned")
            self._assignments[row.id] = row
            faculty = self._faculty.get(row.faculty_id)
            if faculty is not None:
                self._faculty[faculty.id] = faculty.model_copy(
                    update={"current_hours": faculty.current_hours + row.hours_per_week}
                )
            return row.model_copy()

    def update_workload_assignment_status(self, assignment_id: int, status: str) -> WorkloadAssignmentOut | None:
        with self._lock:
            return self._update(self._assignments, assignment_id, {"status": status})

    def delete_workload_assignment(self, assignment_id: int) -> bool:
        with self._lock:
            row = self._assignments.pop(assignment_id, None)
            if row is None:
                return False
            faculty = self._faculty.get(row.faculty_id)
            if faculty is not None:
                self._faculty[faculty.id] = faculty.model_copy(
                    update={"current_hours": max(0, faculty.current_hours - row.hours_per_week)}
                )
            return True

    def count_workload_assignments(self, status: str | None = None) -> int:
        with self._lock:
            return sum(1 for a in self._assignments.values() if status is None or a.status == status)

    # Timetable

    def list_timetable_slots(
        self,
        division_id: int | None = None,
        faculty_id: int | None = None,
    ) -> list[TimetableSlotDetail]:
        with self._lock:
            rows = [
                s
                for s in self._slots.values()
                if (division_id is None or s.division_id == division_id)
                and (faculty_id is None or s.faculty_id == faculty_id)
            ]
            rows.sort(key=lambda s: (s.day_of_week, s.start_time, s.id))
            return [self._joined(s, TimetableSlotDetail) for s in rows]

    def get_timetable_slot(self, slot_id: int) -> TimetableSlotOut | None:
        with self._lock:
            row = self._slots.get(slot_id)
            return row.model_copy() if row is not None else None

    def create_timetable_slot(self, data: dict[str, Any]) -> TimetableSlotOut:
        with self._lock:
            row = TimetableSlotOut(**data, id=self._next_id("slots"))
            self._slots[row.id] = row
            return row.model_copy()

    def update_timetable_slot(self, slot_id: int, updates: dict[str, Any]) -> TimetableSlotOut | None:
        with self._lock:
            return self._update(self._slots, slot_id, updates)

    def delete_timetable_slot(self, slot_id: int) -> bool:
        with self._lock:
            return self._slots.pop(slot_id, None) is not None

    # Excel uploads

    def list_excel_uploads(self, include_deleted: bool = True) -> list[ExcelUploadOut]:
        with self._lock:
            rows = [u for u in self._uploads.values() if include_deleted or u.status != "deleted"]
            rows.sort(key=lambda u: (u.uploaded_at, u.id), reverse=True)
            return [u.model_copy() for u in rows]

    def get_excel_upload(self, upload_id: int) -> ExcelUploadOut | None:
        with self._lock:
            row = self._uploads.get(upload_id)
            return row.model_copy() if row is not None else None

    def create_excel_upload(self, data: dict[str, Any]) -> ExcelUploadOut:
        with self._lock:
            row = ExcelUploadOut(
                **data,
                id=self._next_id("uploads"),
                status="processing",
                uploaded_at=datetime.now(timezone.utc),
                processed_rows=0,
                total_rows=0,
            )
            self._uploads[row.id] = row
            return row.model_copy()

    def update_excel_upload_status(
        self,
        upload_id: int,
        status: str,
        processed_rows: int | None = None,
        total_rows: int | None = None,
        error_message: str | None = None,
    ) -> ExcelUploadOut | None:
        updates = upload_status_updates(status, processed_rows, total_rows, error_message)
        with self._lock:
            return self._update(self._uploads, upload_id, updates)

    def finish_excel_upload(
        self,
        upload_id: int,
        status: str,
        processed_rows: int | None = None,
        total_rows: int | None = None,
        error_message: str | None = None,
    ) -> ExcelUploadOut | None:
        updates = upload_status_updates(status, processed_rows, total_rows, error_message)
        with self._lock:
            current = self._uploads.get(upload_id)
            if current is None or current.status == "deleted":
                return None
            return self._update(self._uploads, upload_id, updates)
