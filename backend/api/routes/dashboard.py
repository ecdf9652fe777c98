from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from schemas.dashboard import DashboardStats, FacultyWorkloadOut
from services.dashboard import get_dashboard_stats, get_workload_overview
from storage import Storage, get_storage


router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(storage: Storage = Depends(get_storage)) -> DashboardStats:
    return get_dashboard_stats(storage)


@router.get("/workload", response_model=list[FacultyWorkloadOut])
def workload_overview(
    department: str | None = Query(default=None),
    storage: Storage = Depends(get_storage),
) -> list[FacultyWorkloadOut]:
    return get_workload_overview(storage, department=department)
