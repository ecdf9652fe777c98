from __future__ import annotations

from typing import Literal

from schemas.common import CamelModel


WorkloadLevel = Literal["under_limit", "at_limit", "over_limit"]


class DashboardStats(CamelModel):
    total_faculty: int
    active_courses: int
    pending_tasks: int
    avg_workload: float


class FacultyWorkloadOut(CamelModel):
    faculty_id: int
    name: str
    department: str
    position: str
    current_hours: int
    max_hours: int
    percentage: float
    status: WorkloadLevel
    assignment_count: int
