from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import require_admin
from api.routes import auth, dashboard, divisions, excel_uploads, faculty, subjects, timetable, workload_assignments


api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Protect every non-auth route.
_protected = [Depends(require_admin)]
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"], dependencies=_protected)
api_router.include_router(faculty.router, prefix="/faculty", tags=["faculty"], dependencies=_protected)
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"], dependencies=_protected)
api_router.include_router(divisions.router, prefix="/divisions", tags=["divisions"], dependencies=_protected)
api_router.include_router(
    workload_assignments.router,
    prefix="/workload-assignments",
    tags=["workload"],
    dependencies=_protected,
)
api_router.include_router(timetable.router, prefix="/timetable", tags=["timetable"], dependencies=_protected)
api_router.include_router(
    excel_uploads.router,
    prefix="/excel-uploads",
    tags=["excel-uploads"],
    dependencies=_protected,
)
