from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Integer, Text, UniqueConstraint

from models.base import Base


class Faculty(Base):
    __tablename__ = "faculty"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    position = Column(Text, nullable=False)
    department = Column(Text, nullable=False, index=True)

    max_hours = Column(Integer, nullable=False)
    # Sum of hours_per_week over this faculty's workload assignments.
    current_hours = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        UniqueConstraint("email", name="uq_faculty_email"),
        CheckConstraint(
            "position in ('professor', 'associate_professor', 'assistant_professor')",
            name="ck_faculty_position",
        ),
        CheckConstraint("max_hours >= 0", name="ck_faculty_max_hours"),
        CheckConstraint("current_hours >= 0", name="ck_faculty_current_hours"),
    )
