from __future__ import annotations

from pydantic import Field

from schemas.common import CamelModel, OrmModel


class SubjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=40)
    department: str = Field(min_length=1, max_length=200)
    credits: int = Field(ge=1, le=12)
    semester: int | None = Field(default=None, ge=1, le=12)


class SubjectUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=40)
    department: str | None = Field(default=None, min_length=1, max_length=200)
    credits: int | None = Field(default=None, ge=1, le=12)
    semester: int | None = Field(default=None, ge=1, le=12)


class SubjectOut(OrmModel):
    id: int
    name: str
    code: str
    department: str
    credits: int
    semester: int | None = None
