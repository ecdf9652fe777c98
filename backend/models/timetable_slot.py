from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Integer, Text

from models.base import Base


class TimetableSlot(Base):
    __tablename__ = "timetable_slots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    division_id = Column(Integer, nullable=False, index=True)
    faculty_id = Column(Integer, nullable=False, index=True)
    subject_id = Column(Integer, nullable=False, index=True)

    # 0 = Monday ... 6 = Sunday
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    classroom = Column(Text, nullable=False)
    type = Column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 and day_of_week <= 6", name="ck_timetable_slots_day_of_week"),
        CheckConstraint("type in ('lecture', 'tutorial', 'practical')", name="ck_timetable_slots_type"),
    )
