from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from schemas.common import CamelModel, OrmModel


UploadStatus = Literal["processing", "completed", "error", "deleted"]


class ExcelUploadCreate(CamelModel):
    filename: str = Field(min_length=1, max_length=255)
    original_name: str = Field(min_length=1, max_length=255)
    file_size: int = Field(ge=0)


class ExcelUploadStatusUpdate(CamelModel):
    status: UploadStatus
    processed_rows: int | None = Field(default=None, ge=0)
    total_rows: int | None = Field(default=None, ge=0)


class ExcelUploadOut(OrmModel):
    id: int
    filename: str
    original_name: str
    file_size: int
    status: str
    uploaded_at: datetime
    processed_rows: int = 0
    total_rows: int = 0
    error_message: str | None = None
