from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.division import Division
from models.excel_upload import ExcelUpload
from models.faculty import Faculty
from models.subject import Subject
from models.timetable_slot import TimetableSlot
from models.workload_assignment import WorkloadAssignment
from schemas.dashboard import DashboardStats
from schemas.division import DivisionOut
from schemas.excel_upload import ExcelUploadOut
from schemas.faculty import FacultyOut
from schemas.subject import SubjectOut
from schemas.timetable import TimetableSlotDetail, TimetableSlotOut
from schemas.workload import FacultyWithWorkload, WorkloadAssignmentDetail, WorkloadAssignmentOut
from storage.base import (
    DuplicateKeyError,
    InUseError,
    InvalidValueError,
    Storage,
    check_faculty_hours,
    upload_status_updates,
)


logger = logging.getLogger(__name__)


def _faculty_out(row: Faculty | None) -> FacultyOut | None:
    return FacultyOut.model_validate(row) if row is not None else None


def _subject_out(row: Subject | None) -> SubjectOut | None:
    return SubjectOut.model_validate(row) if row is not None else None


def _division_out(row: Division | None) -> DivisionOut | None:
    return DivisionOut.model_validate(row) if row is not None else None


def _is_check_violation(exc: IntegrityError) -> bool:
    # psycopg2 reports SQLSTATE 23514; sqlite only says so in the message.
    if getattr(exc.orig, "pgcode", None) == "23514":
        return True
    return "check constraint" in str(exc.orig).lower()


class SqlStorage(Storage):
    """SQLAlchemy-backed repository; one instance per request-scoped session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("Integrity violation while saving %s: %s", what, exc.orig)
            if _is_check_violation(exc):
                raise InvalidValueError("Value violates a column constraint") from exc
            raise DuplicateKeyError(f"{what} already exists") from exc

    def _apply(self, obj: Any, updates: dict[str, Any], what: str) -> None:
        for k, v in updates.items():
            setattr(obj, k, v)
        self._commit(what)
        self.db.refresh(obj)

    def _is_referenced(self, *clauses: Any) -> bool:
        for model, column, value in clauses:
            if self.db.execute(select(model.id).where(column == value).limit(1)).first() is not None:
                return True
        return False

    # Faculty

    def list_faculty(self, department: str | None = None) -> list[FacultyOut]:
        q = select(Faculty).order_by(Faculty.id.asc())
        if department is not None:
            q = q.where(Faculty.department == department)
        return [FacultyOut.model_validate(r) for r in self.db.execute(q).scalars().all()]

    def get_faculty(self, faculty_id: int) -> FacultyOut | None:
        return _faculty_out(self.db.get(Faculty, faculty_id))

    def get_faculty_with_workload(self, faculty_id: int) -> FacultyWithWorkload | None:
        row = self.db.get(Faculty, faculty_id)
        if row is None:
            return None
        out = FacultyWithWorkload.model_validate(row)
        out.assignments = self.list_workload_assignments(faculty_id=faculty_id)
        return out

    def create_faculty(self, data: dict[str, Any]) -> FacultyOut:
        check_faculty_hours(data)
        row = Faculty(**data, current_hours=0)
        self.db.add(row)
        self._commit("faculty email")
        self.db.refresh(row)
        return FacultyOut.model_validate(row)

    def update_faculty(self, faculty_id: int, updates: dict[str, Any]) -> FacultyOut | None:
        check_faculty_hours(updates)
        row = self.db.get(Faculty, faculty_id)
        if row is None:
            return None
        self._apply(row, updates, "faculty email")
        return FacultyOut.model_validate(row)

    def update_faculty_workload(self, faculty_id: int, hours: int) -> FacultyOut | None:
        return self.update_faculty(faculty_id, {"current_hours": int(hours)})

    def delete_faculty(self, faculty_id: int) -> bool:
        row = self.db.get(Faculty, faculty_id)
        if row is None:
            return False
        if self._is_referenced(
            (WorkloadAssignment, WorkloadAssignment.faculty_id, faculty_id),
            (TimetableSlot, TimetableSlot.faculty_id, faculty_id),
        ):
            raise InUseError("Faculty still has workload assignments or timetable slots")
        self.db.delete(row)
        self.db.commit()
        return True

    # Subjects

    def list_subjects(self, department: str | None = None) -> list[SubjectOut]:
        q = select(Subject).order_by(Subject.id.asc())
        if department is not None:
            q = q.where(Subject.department == department)
        return [SubjectOut.model_validate(r) for r in self.db.execute(q).scalars().all()]

    def get_subject(self, subject_id: int) -> SubjectOut | None:
        return _subject_out(self.db.get(Subject, subject_id))

    def create_subject(self, data: dict[str, Any]) -> SubjectOut:
        row = Subject(**data)
        self.db.add(row)
        self._commit("subject code")
        self.db.refresh(row)
        return SubjectOut.model_validate(row)

    def update_subject(self, subject_id: int, updates: dict[str, Any]) -> SubjectOut | None:
        row = self.db.get(Subject, subject_id)
        if row is None:
            return None
        self._apply(row, updates, "subject code")
        return SubjectOut.model_validate(row)

    def delete_subject(self, subject_id: int) -> bool:
        row = self.db.get(Subject, subject_id)
        if row is None:
            return False
        if self._is_referenced(
            (WorkloadAssignment, WorkloadAssignment.subject_id, subject_id),
            (TimetableSlot, TimetableSlot.subject_id, subject_id),
        ):
            raise InUseError("Subject still has workload assignments or timetable slots")
        self.db.delete(row)
        self.db.commit()
        return True

    def count_subjects(self) -> int:
        return int(self.db.execute(select(func.count(Subject.id))).scalar_one())

    # Divisions

    def list_divisions(self, department: str | None = None) -> list[DivisionOut]:
        q = select(Division).order_by(Division.id.asc())
        if department is not None:
            q = q.where(Division.department == department)
        return [DivisionOut.model_validate(r) for r in self.db.execute(q).scalars().all()]

    def get_division(self, division_id: int) -> DivisionOut | None:
        return _division_out(self.db.get(Division, division_id))

    def create_division(self, data: dict[str, Any]) -> DivisionOut:
        row = Division(**data)
        self.db.add(row)
        self._commit("division code")
        self.db.refresh(row)
        return DivisionOut.model_validate(row)

    def update_division(self, division_id: int, updates: dict[str, Any]) -> DivisionOut | None:
        row = self.db.get(Division, division_id)
        if row is None:
            return None
        self._apply(row, updates, "division code")
        return DivisionOut.model_validate(row)

    def delete_division(self, division_id: int) -> bool:
        row = self.db.get(Division, division_id)
        if row is None:
            return False
        if self._is_referenced(
            (WorkloadAssignment, WorkloadAssignment.division_id, division_id),
            (TimetableSlot, TimetableSlot.division_id, division_id),
        ):
            raise InUseError("Division still has workload assignments or timetable slots")
        self.db.delete(row)
        self.db.commit()
        return True

    # Workload assignments

    def _assignment_details(self, q) -> list[WorkloadAssignmentDetail]:
        out: list[WorkloadAssignmentDetail] = []
        for assignment, faculty, subject, division in self.db.execute(q).all():
            detail = WorkloadAssignmentDetail.model_validate(assignment)
            detail.faculty = _faculty_out(faculty)
            detail.subject = _subject_out(subject)
            detail.division = _division_out(division)
            out.append(detail)
        return out

    def _assignment_query(self):
        return (
            select(WorkloadAssignment, Faculty, Subject, Division)
            .outerjoin(Faculty, Faculty.id == WorkloadAssignment.faculty_id)
            .outerjoin(Subject, Subject.id == WorkloadAssignment.subject_id)
            .outerjoin(Division, Division.id == WorkloadAssignment.division_id)
            .order_by(WorkloadAssignment.id.asc())
        )

    def list_workload_assignments(self, faculty_id: int | None = None) -> list[WorkloadAssignmentDetail]:
        q = self._assignment_query()
        if faculty_id is not None:
            q = q.where(WorkloadAssignment.faculty_id == faculty_id)
        return self._assignment_details(q)

    def get_workload_assignment(self, assignment_id: int) -> WorkloadAssignmentDetail | None:
        rows = self._assignment_details(self._assignment_query().where(WorkloadAssignment.id == assignment_id))
        return rows[0] if rows else None

    def create_workload_assignment(self, data: dict[str, Any]) -> WorkloadAssignmentOut:
        row = WorkloadAssignment(**data, status="assigned")
        self.db.add(row)
        self.db.flush()

        # The increment is evaluated by the database inside this transaction,
        # so concurrent creates for the same faculty cannot lose an update.
        result = self.db.execute(
            update(Faculty)
            .where(Faculty.id == row.faculty_id)
            .values(current_hours=Faculty.current_hours + row.hours_per_week)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(
                "Workload assignment references unknown faculty_id=%s; hours not counted",
                row.faculty_id,
            )
        self._commit("workload assignment")
        self.db.refresh(row)
        return WorkloadAssignmentOut.model_validate(row)

    def update_workload_assignment_status(self, assignment_id: int, status: str) -> WorkloadAssignmentOut | None:
        row = self.db.get(WorkloadAssignment, assignment_id)
        if row is None:
            return None
        self._apply(row, {"status": status}, "workload assignment")
        return WorkloadAssignmentOut.model_validate(row)

    def delete_workload_assignment(self, assignment_id: int) -> bool:
        row = self.db.execute(
            select(WorkloadAssignment.faculty_id, WorkloadAssignment.hours_per_week).where(
                WorkloadAssignment.id == assignment_id
            )
        ).first()
        if row is None:
            return False
        faculty_id, hours = row

        result = self.db.execute(
            delete(WorkloadAssignment)
            .where(WorkloadAssignment.id == assignment_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Lost a race with another delete of the same row.
            self.db.rollback()
            return False

        remaining = Faculty.current_hours - hours
        self.db.execute(
            update(Faculty)
            .where(Faculty.id == faculty_id)
            .values(current_hours=case((remaining > 0, remaining), else_=0))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return True

    def count_workload_assignments(self, status: str | None = None) -> int:
        q = select(func.count(WorkloadAssignment.id))
        if status is not None:
            q = q.where(WorkloadAssignment.status == status)
        return int(self.db.execute(q).scalar_one())

    # Timetable

    def list_timetable_slots(
        self,
        division_id: int | None = None,
        faculty_id: int | None = None,
    ) -> list[TimetableSlotDetail]:
        q = (
            select(TimetableSlot, Faculty, Subject, Division)
            .outerjoin(Faculty, Faculty.id == TimetableSlot.faculty_id)
            .outerjoin(Subject, Subject.id == TimetableSlot.subject_id)
            .outerjoin(Division, Division.id == TimetableSlot.division_id)
            .order_by(TimetableSlot.day_of_week.asc(), TimetableSlot.start_time.asc(), TimetableSlot.id.asc())
        )
        if division_id is not None:
            q = q.where(TimetableSlot.division_id == division_id)
        if faculty_id is not None:
            q = q.where(TimetableSlot.faculty_id == faculty_id)

        out: list[TimetableSlotDetail] = []
        for slot, faculty, subject, division in self.db.execute(q).all():
            detail = TimetableSlotDetail.model_validate(slot)
            detail.faculty = _faculty_out(faculty)
            detail.subject = _subject_out(subject)
            detail.division = _division_out(division)
            out.append(detail)
        return out

    def get_timetable_slot(self, slot_id: int) -> TimetableSlotOut | None:
        row = self.db.get(TimetableSlot, slot_id)
        return TimetableSlotOut.model_validate(row) if row is not None else None

    def create_timetable_slot(self, data: dict[str, Any]) -> TimetableSlotOut:
        row = TimetableSlot(**data)
        self.db.add(row)
        self._commit("timetable slot")
        self.db.refresh(row)
        return TimetableSlotOut.model_validate(row)

    def update_timetable_slot(self, slot_id: int, updates: dict[str, Any]) -> TimetableSlotOut | None:
        row = self.db.get(TimetableSlot, slot_id)
        if row is None:
            return None
        self._apply(row, updates, "timetable slot")
        return TimetableSlotOut.model_validate(row)

    def delete_timetable_slot(self, slot_id: int) -> bool:
        result = self.db.execute(
            delete(TimetableSlot).where(TimetableSlot.id == slot_id).execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount > 0

    # Excel uploads

    def list_excel_uploads(self, include_deleted: bool = True) -> list[ExcelUploadOut]:
        q = select(ExcelUpload).order_by(ExcelUpload.uploaded_at.desc(), ExcelUpload.id.desc())
        if not include_deleted:
            q = q.where(ExcelUpload.status != "deleted")
        return [ExcelUploadOut.model_validate(r) for r in self.db.execute(q).scalars().all()]

    def get_excel_upload(self, upload_id: int) -> ExcelUploadOut | None:
        row = self.db.get(ExcelUpload, upload_id)
        return ExcelUploadOut.model_validate(row) if row is not None else None

    def create_excel_upload(self, data: dict[str, Any]) -> ExcelUploadOut:
        row = ExcelUpload(**data, status="processing", processed_rows=0, total_rows=0)
        self.db.add(row)
        self._commit("excel upload")
        self.db.refresh(row)
        return ExcelUploadOut.model_validate(row)

    def update_excel_upload_status(
        self,
        upload_id: int,
        status: str,
        processed_rows: int | None = None,
        total_rows: int | None = None,
        error_message: str | None = None,
    ) -> ExcelUploadOut | None:
        row = self.db.get(ExcelUpload, upload_id)
        if row is None:
            return None
        self._apply(row, upload_status_updates(status, processed_rows, total_rows, error_message), "excel upload")
        return ExcelUploadOut.model_validate(row)

    def finish_excel_upload(
        self,
        upload_id: int,
        status: str,
        processed_rows: int | None = None,
        total_rows: int | None = None,
        error_message: str | None = None,
    ) -> ExcelUploadOut | None:
        result = self.db.execute(
            update(ExcelUpload)
            .where(ExcelUpload.id == upload_id, ExcelUpload.status != "deleted")
            .values(**upload_status_updates(status, processed_rows, total_rows, error_message))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount == 0:
            return None
        return self.get_excel_upload(upload_id)

    # Aggregates

    def dashboard_stats(self) -> DashboardStats:
        total_faculty, avg_hours = self.db.execute(
            select(func.count(Faculty.id), func.avg(Faculty.current_hours))
        ).one()
        return DashboardStats(
            total_faculty=int(total_faculty),
            active_courses=self.count_subjects(),
            pending_tasks=self.count_workload_assignments(status="pending"),
            # AVG returns NUMERIC on Postgres and REAL on sqlite; NULL for no rows.
            avg_workload=round(float(avg_hours), 1) if avg_hours is not None else 0.0,
        )
