from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator, model_validator

from schemas.common import CamelModel, OrmModel
from schemas.division import DivisionOut
from schemas.faculty import FacultyOut
from schemas.subject import SubjectOut
from schemas.workload import AssignmentType


DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def parse_day_of_week(value: Any) -> Any:
    """Accept 0-6 (Monday=0) or a day name ("Monday", "mon", "TUE")."""

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        key = text.lower()
        for idx, name in enumerate(DAY_NAMES):
            if key == name.lower() or (len(key) >= 3 and name.lower().startswith(key)):
                return idx
        raise ValueError(f"unknown day name: {value!r}")
    return value


class TimetableSlotCreate(CamelModel):
    division_id: int = Field(ge=1)
    faculty_id: int = Field(ge=1)
    subject_id: int = Field(ge=1)
    day_of_week: int = Field(ge=0, le=6)
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    classroom: str = Field(min_length=1, max_length=60)
    type: AssignmentType

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _parse_day(cls, v: Any) -> Any:
        return parse_day_of_week(v)

    @model_validator(mode="after")
    def _check_time_order(self) -> "TimetableSlotCreate":
        # Zero-padded HH:MM strings order the same as the times they denote.
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class TimetableSlotUpdate(CamelModel):
    division_id: int | None = Field(default=None, ge=1)
    faculty_id: int | None = Field(default=None, ge=1)
    subject_id: int | None = Field(default=None, ge=1)
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    end_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    classroom: str | None = Field(default=None, min_length=1, max_length=60)
    type: AssignmentType | None = None

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _parse_day(cls, v: Any) -> Any:
        return parse_day_of_week(v)


class TimetableSlotOut(OrmModel):
    id: int
    division_id: int
    faculty_id: int
    subject_id: int
    day_of_week: int
    start_time: str
    end_time: str
    classroom: str
    type: str


class TimetableSlotDetail(TimetableSlotOut):
    faculty: FacultyOut | None = None
    subject: SubjectOut | None = None
    division: DivisionOut | None = None
