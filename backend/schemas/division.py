from __future__ import annotations

from pydantic import Field

from schemas.common import CamelModel, OrmModel


ACADEMIC_YEAR_PATTERN = r"^\d{4}(-\d{2}|-\d{4})?$"


class DivisionCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=40)
    department: str = Field(min_length=1, max_length=200)
    semester: int = Field(ge=1, le=12)
    academic_year: str = Field(pattern=ACADEMIC_YEAR_PATTERN)
    student_count: int = Field(default=0, ge=0, le=1000)


class DivisionUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=40)
    department: str | None = Field(default=None, min_length=1, max_length=200)
    semester: int | None = Field(default=None, ge=1, le=12)
    academic_year: str | None = Field(default=None, pattern=ACADEMIC_YEAR_PATTERN)
    student_count: int | None = Field(default=None, ge=0, le=1000)


class DivisionOut(OrmModel):
    id: int
    name: str
    code: str | None = None
    department: str
    semester: int
    academic_year: str
    student_count: int = 0
