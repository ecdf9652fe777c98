from __future__ import annotations

import abc
from typing import Any

from schemas.dashboard import DashboardStats
from schemas.division import DivisionOut
from schemas.excel_upload import ExcelUploadOut
from schemas.faculty import FacultyOut
from schemas.subject import SubjectOut
from schemas.timetable import TimetableSlotDetail, TimetableSlotOut
from schemas.workload import FacultyWithWorkload, WorkloadAssignmentDetail, WorkloadAssignmentOut


class StorageError(Exception):
    """Base class for repository errors the API maps onto 4xx responses."""


class DuplicateKeyError(StorageError):
    """A unique column (faculty email, subject code, division code) already holds the value."""


class InUseError(StorageError):
    """The row is still referenced by workload assignments or timetable slots."""


class InvalidValueError(StorageError):
    """A column constraint (non-negative hours, allowed position) rejected the value."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


def check_faculty_hours(data: dict[str, Any]) -> None:
    for column, field in (("max_hours", "maxHours"), ("current_hours", "currentHours")):
        value = data.get(column)
        if value is not None and value < 0:
            raise InvalidValueError(f"{field} must not be negative", field=field)


def upload_status_updates(
    status: str,
    processed_rows: int | None = None,
    total_rows: int | None = None,
    error_message: str | None = None,
) -> dict[str, Any]:
    updates: dict[str, Any] = {"status": status}
    if processed_rows is not None:
        updates["processed_rows"] = int(processed_rows)
    if total_rows is not None:
        updates["total_rows"] = int(total_rows)
    if error_message is not None:
        updates["error_message"] = error_message
    return updates


class Storage(abc.ABC):
    """Repository contract shared by the SQL and in-memory backends.

    Inputs are validated, snake_case dicts. Lookups of unknown ids return
    ``None`` (or ``False`` for deletes); they never raise. Joined reads embed
    the referenced faculty/subject/division and set them to ``None`` when the
    reference does not resolve.

    ``create_workload_assignment`` and ``delete_workload_assignment`` adjust
    the owning faculty's ``current_hours`` in the same unit of work as the row
    change.
    """

    # Faculty

    @abc.abstractmethod
    def list_faculty(self, department: str | None = None) -> list[FacultyOut]: ...

    @abc.abstractmethod
    def get_faculty(self, faculty_id: int) -> FacultyOut | None: ...

    @abc.abstractmethod
    def get_faculty_with_workload(self, faculty_id: int) -> FacultyWithWorkload | None: ...

    @abc.abstractmethod
    def create_faculty(self, data: dict[str, Any]) -> FacultyOut: ...

    @abc.abstractmethod
    def update_faculty(self, faculty_id: int, updates: dict[str, Any]) -> FacultyOut | None: ...

    @abc.abstractmethod
    def update_faculty_workload(self, faculty_id: int, hours: int) -> FacultyOut | None: ...

    @abc.abstractmethod
    def delete_faculty(self, faculty_id: int) -> bool: ...

    # Subjects

    @abc.abstractmethod
    def list_subjects(self, department: str | None = None) -> list[SubjectOut]: ...

    @abc.abstractmethod
    def get_subject(self, subject_id: int) -> SubjectOut | None: ...

    @abc.abstractmethod
    def create_subject(self, data: dict[str, Any]) -> SubjectOut: ...

    @abc.abstractmethod
    def update_subject(self, subject_id: int, updates: dict[str, Any]) -> SubjectOut | None: ...

    @abc.abstractmethod
    def delete_subject(self, subject_id: int) -> bool: ...

    @abc.abstractmethod
    def count_subjects(self) -> int: ...

    # Divisions

    @abc.abstractmethod
    def list_divisions(self, department: str | None = None) -> list[DivisionOut]: ...

    @abc.abstractmethod
    def get_division(self, division_id: int) -> DivisionOut | None: ...

    @abc.abstractmethod
    def create_division(self, data: dict[str, Any]) -> DivisionOut: ...

    @abc.abstractmethod
    def update_division(self, division_id: int, updates: dict[str, Any]) -> DivisionOut | None: ...

    @abc.abstractmethod
    def delete_division(self, division_id: int) -> bool: ...

    # Workload assignments

    @abc.abstractmethod
    def list_workload_assignments(self, faculty_id: int | None = None) -> list[WorkloadAssignmentDetail]: ...

    @abc.abstractmethod
    def get_workload_assignment(self, assignment_id: int) -> WorkloadAssignmentDetail | None: ...

    @abc.abstractmethod
    def create_workload_assignment(self, data: dict[str, Any]) -> WorkloadAssignmentOut: ...

    @abc.abstractmethod
    def update_workload_assignment_status(self, assignment_id: int, status: str) -> WorkloadAssignmentOut | None: ...

    @abc.abstractmethod
    def delete_workload_assignment(self, assignment_id: int) -> bool: ...

    @abc.abstractmethod
    def count_workload_assignments(self, status: str | None = None) -> int: ...

    # Timetable

    @abc.abstractmethod
    def list_timetable_slots(
        self,
        division_id: int | None = None,
        faculty_id: int | None = None,
    ) -> list[TimetableSlotDetail]: ...

    @abc.abstractmethod
    def get_timetable_slot(self, slot_id: int) -> TimetableSlotOut | None: ...

    @abc.abstractmethod
    def create_timetable_slot(self, data: dict[str, Any]) -> TimetableSlotOut: ...

    @abc.abstractmethod
    def update_timetable_slot(self, slot_id: int, updates: dict[str, Any]) -> TimetableSlotOut | None: ...

    @abc.abstractmethod
    def delete_timetable_slot(self, slot_id: int) -> bool: ...

    # Excel uploads

    @abc.abstractmethod
    def list_excel_uploads(self, include_deleted: bool = True) -> list[ExcelUploadOut]: ...

    @abc.abstractmethod
    def get_excel_upload(self, upload_id: int) -> ExcelUploadOut | None: ...

    @abc.abstractmethod
    def create_excel_upload(self, data: dict[str, Any]) -> ExcelUploadOut: ...

    @abc.abstractmethod
    def update_excel_upload_status(
        self,
        upload_id: int,
        status: str,
        processed_rows: int | None = None,
        total_rows: int | None = None,
        error_message: str | None = None,
    ) -> ExcelUploadOut | None: ...

    @abc.abstractmethod
    def finish_excel_upload(
        self,
        upload_id: int,
        status: str,
        processed_rows: int | None = None,
        total_rows: int | None = None,
        error_message: str | None = None,
    ) -> ExcelUploadOut | None:
        """Record an import outcome unless the upload was soft-deleted meanwhile.

        Returns ``None`` when the row is missing or already ``deleted``. The
        status check and the write are atomic.
        """

    # Aggregates

    def dashboard_stats(self) -> DashboardStats:
        faculty = self.list_faculty()
        total_hours = sum(f.current_hours for f in faculty)
        return DashboardStats(
            total_faculty=len(faculty),
            active_courses=self.count_subjects(),
            pending_tasks=self.count_workload_assignments(status="pending"),
            avg_workload=round(total_hours / len(faculty), 1) if faculty else 0.0,
        )
