from __future__ import annotations

from typing import Literal

from pydantic import Field

from schemas.common import CamelModel, OrmModel


Position = Literal["professor", "associate_professor", "assistant_professor"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class FacultyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=254, pattern=EMAIL_PATTERN)
    position: Position
    department: str = Field(min_length=1, max_length=200)


class FacultyUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: str | None = Field(default=None, min_length=3, max_length=254, pattern=EMAIL_PATTERN)
    position: Position | None = None
    department: str | None = Field(default=None, min_length=1, max_length=200)
    max_hours: int | None = Field(default=None, ge=0, le=40)


class FacultyOut(OrmModel):
    id: int
    name: str
    email: str
    position: str
    department: str
    max_hours: int
    current_hours: int = 0
