from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Text

from models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExcelUpload(Base):
    __tablename__ = "excel_uploads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(Text, nullable=False)
    original_name = Column(Text, nullable=False)
    file_size = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default="processing", server_default="processing")
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    processed_rows = Column(Integer, nullable=False, default=0, server_default="0")
    total_rows = Column(Integer, nullable=False, default=0, server_default="0")
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status in ('processing', 'completed', 'error', 'deleted')",
            name="ck_excel_uploads_status",
        ),
        CheckConstraint("file_size >= 0", name="ck_excel_uploads_file_size"),
    )
