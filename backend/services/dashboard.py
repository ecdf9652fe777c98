from __future__ import annotations

from schemas.dashboard import DashboardStats, FacultyWorkloadOut
from services.workload import summarize_faculty_workload
from storage.base import Storage


def get_dashboard_stats(storage: Storage) -> DashboardStats:
    return storage.dashboard_stats()


def get_workload_overview(storage: Storage, department: str | None = None) -> list[FacultyWorkloadOut]:
    faculty = storage.list_faculty(department=department)
    assignments = storage.list_workload_assignments()
    return summarize_faculty_workload(faculty, assignments)
