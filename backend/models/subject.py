from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Integer, Text, UniqueConstraint

from models.base import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    code = Column(Text, nullable=False)
    department = Column(Text, nullable=False, index=True)
    credits = Column(Integer, nullable=False)
    semester = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("code", name="uq_subjects_code"),
        CheckConstraint("credits >= 1", name="ck_subjects_credits"),
        CheckConstraint("semester is null or (semester >= 1 and semester <= 12)", name="ck_subjects_semester"),
    )
