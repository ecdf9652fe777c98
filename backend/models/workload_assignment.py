from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Integer, Text

from models.base import Base


class WorkloadAssignment(Base):
    __tablename__ = "workload_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Plain integer references; reads resolve them and null out missing rows.
    faculty_id = Column(Integer, nullable=False, index=True)
    subject_id = Column(Integer, nullable=False, index=True)
    division_id = Column(Integer, nullable=False, index=True)

    type = Column(Text, nullable=False)
    hours_per_week = Column(Integer, nullable=False)
    classroom = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="assigned", server_default="assigned")

    __table_args__ = (
        CheckConstraint("type in ('lecture', 'tutorial', 'practical')", name="ck_workload_assignments_type"),
        CheckConstraint(
            "hours_per_week >= 1 and hours_per_week <= 20",
            name="ck_workload_assignments_hours_per_week",
        ),
        CheckConstraint(
            "status in ('assigned', 'pending', 'completed')",
            name="ck_workload_assignments_status",
        ),
    )
