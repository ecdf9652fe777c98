from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Integer, Text, UniqueConstraint

from models.base import Base


class Division(Base):
    __tablename__ = "divisions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    code = Column(Text, nullable=True)
    department = Column(Text, nullable=False, index=True)
    semester = Column(Integer, nullable=False)
    academic_year = Column(Text, nullable=False)
    student_count = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        # NULL codes never collide, so divisions without a code stay unconstrained.
        UniqueConstraint("code", name="uq_divisions_code"),
        CheckConstraint("semester >= 1 and semester <= 12", name="ck_divisions_semester"),
        CheckConstraint("student_count >= 0", name="ck_divisions_student_count"),
    )
