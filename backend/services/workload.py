from __future__ import annotations

from collections import Counter
from typing import Iterable

from schemas.dashboard import FacultyWorkloadOut, WorkloadLevel
from schemas.faculty import FacultyOut
from schemas.workload import WorkloadAssignmentOut


# Weekly teaching-hour ceiling per academic position.
MAX_HOURS_BY_POSITION: dict[str, int] = {
    "professor": 14,
    "associate_professor": 16,
    "assistant_professor": 18,
}

AT_LIMIT_PERCENT = 90.0
OVER_LIMIT_PERCENT = 100.0


def max_hours_for_position(position: str) -> int:
    try:
        return MAX_HOURS_BY_POSITION[position]
    except KeyError:
        raise ValueError(f"unknown position: {position!r}") from None


def workload_percentage(current_hours: int, max_hours: int) -> float:
    if max_hours <= 0:
        # No allowance at all: any load is over the limit.
        return 0.0 if current_hours <= 0 else OVER_LIMIT_PERCENT
    return round(current_hours / max_hours * 100.0, 1)


def workload_level(current_hours: int, max_hours: int) -> WorkloadLevel:
    pct = workload_percentage(current_hours, max_hours)
    if pct >= OVER_LIMIT_PERCENT:
        return "over_limit"
    if pct >= AT_LIMIT_PERCENT:
        return "at_limit"
    return "under_limit"


def summarize_faculty_workload(
    faculty: Iterable[FacultyOut],
    assignments: Iterable[WorkloadAssignmentOut],
) -> list[FacultyWorkloadOut]:
    counts = Counter(a.faculty_id for a in assignments)
    return [
        FacultyWorkloadOut(
            faculty_id=f.id,
            name=f.name,
            department=f.department,
            position=f.position,
            current_hours=f.current_hours,
            max_hours=f.max_hours,
            percentage=workload_percentage(f.current_hours, f.max_hours),
            status=workload_level(f.current_hours, f.max_hours),
            assignment_count=counts.get(f.id, 0),
        )
        for f in faculty
    ]
