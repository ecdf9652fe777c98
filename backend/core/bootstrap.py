from __future__ import annotations

import logging

from core.config import settings
from core.database import ENGINE
from models.base import Base
from storage import storage_session
from storage.base import Storage
from services.workload import max_hours_for_position


logger = logging.getLogger(__name__)


SAMPLE_FACULTY = [
    ("Dr. Rajesh Kumar", "rajesh.kumar@college.edu", "professor", "Computer Science"),
    ("Prof. Priya Sharma", "priya.sharma@college.edu", "associate_professor", "Computer Science"),
    ("Dr. Amit Patel", "amit.patel@college.edu", "assistant_professor", "Computer Science"),
    ("Dr. Sunita Rao", "sunita.rao@college.edu", "professor", "Mathematics"),
    ("Prof. Vikram Singh", "vikram.singh@college.edu", "associate_professor", "Physics"),
]

SAMPLE_SUBJECTS = [
    ("Advanced Algorithms", "CS401", "Computer Science", 4, 7),
    ("Database Management Systems", "CS402", "Computer Science", 3, 5),
    ("Web Development", "CS403", "Computer Science", 3, 6),
    ("Machine Learning", "CS404", "Computer Science", 4, 7),
    ("Linear Algebra", "MATH201", "Mathematics", 3, 3),
    ("Quantum Physics", "PHY301", "Physics", 4, 5),
]

SAMPLE_DIVISIONS = [
    ("Computer Engineering - Division A", "CE-A", "Computer Science", 6, "2024-25", 60),
    ("Computer Engineering - Division B", "CE-B", "Computer Science", 6, "2024-25", 58),
    ("Information Technology - Division A", "IT-A", "Computer Science", 6, "2024-25", 62),
    ("Electronics & Communication - Division A", "EC-A", "Electronics", 6, "2024-25", 55),
]

# (faculty #, subject #, division #, type, hours, classroom), 1-based into the lists above.
SAMPLE_ASSIGNMENTS = [
    (1, 1, 1, "lecture", 4, "CS-101"),
    (2, 2, 1, "lecture", 3, "CS-102"),
    (2, 2, 2, "practical", 4, "LAB-2"),
    (3, 3, 3, "lecture", 3, "CS-201"),
    (4, 5, 1, "tutorial", 2, "MATH-201"),
    (5, 6, 4, "lecture", 4, "PHY-301"),
]


def ensure_schema() -> None:
    """Create missing tables; safe to run on every startup."""

    Base.metadata.create_all(ENGINE)


def seed_sample_data(storage: Storage) -> bool:
    """Insert a small demo dataset into an empty store. Returns False if data already exists."""

    if storage.list_faculty():
        return False

    faculty = [
        storage.create_faculty(
            {
                "name": name,
                "email": email,
                "position": position,
                "department": department,
                "max_hours": max_hours_for_position(position),
            }
        )
        for name, email, position, department in SAMPLE_FACULTY
    ]
    subjects = [
        storage.create_subject(
            {"name": name, "code": code, "department": department, "credits": credits, "semester": semester}
        )
        for name, code, department, credits, semester in SAMPLE_SUBJECTS
    ]
    divisions = [
        storage.create_division(
            {
                "name": name,
                "code": code,
                "department": department,
                "semester": semester,
                "academic_year": academic_year,
                "student_count": student_count,
            }
        )
        for name, code, department, semester, academic_year, student_count in SAMPLE_DIVISIONS
    ]
    for f_idx, s_idx, d_idx, kind, hours, classroom in SAMPLE_ASSIGNMENTS:
        storage.create_workload_assignment(
            {
                "faculty_id": faculty[f_idx - 1].id,
                "subject_id": subjects[s_idx - 1].id,
                "division_id": divisions[d_idx - 1].id,
                "type": kind,
                "hours_per_week": hours,
                "classroom": classroom,
            }
        )

    logger.info(
        "Seeded sample data faculty=%d subjects=%d divisions=%d assignments=%d",
        len(faculty),
        len(subjects),
        len(divisions),
        len(SAMPLE_ASSIGNMENTS),
    )
    return True


def bootstrap() -> None:
    """Startup hook: schema for the SQL backend, optional demo data for either backend."""

    if settings.storage_backend == "sql":
        ensure_schema()

    if settings.seed_sample_data:
        with storage_session() as storage:
            seed_sample_data(storage)
