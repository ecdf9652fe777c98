from __future__ import annotations

from typing import Literal

from pydantic import Field

from schemas.common import CamelModel, OrmModel
from schemas.division import DivisionOut
from schemas.faculty import FacultyOut
from schemas.subject import SubjectOut


AssignmentType = Literal["lecture", "tutorial", "practical"]
AssignmentStatus = Literal["assigned", "pending", "completed"]


class WorkloadAssignmentCreate(CamelModel):
    faculty_id: int = Field(ge=1)
    subject_id: int = Field(ge=1)
    division_id: int = Field(ge=1)
    type: AssignmentType
    hours_per_week: int = Field(ge=1, le=20)
    classroom: str | None = Field(default=None, max_length=60)


class WorkloadAssignmentStatusUpdate(CamelModel):
    status: AssignmentStatus


class WorkloadAssignmentOut(OrmModel):
    id: int
    faculty_id: int
    subject_id: int
    division_id: int
    type: str
    hours_per_week: int
    classroom: str | None = None
    status: str = "assigned"


class WorkloadAssignmentDetail(WorkloadAssignmentOut):
    # None when the referenced row no longer exists.
    faculty: FacultyOut | None = None
    subject: SubjectOut | None = None
    division: DivisionOut | None = None


class FacultyWithWorkload(FacultyOut):
    assignments: list[WorkloadAssignmentDetail] = Field(default_factory=list)
