from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.common import MessageOut
from schemas.workload import (
    WorkloadAssignmentCreate,
    WorkloadAssignmentDetail,
    WorkloadAssignmentOut,
    WorkloadAssignmentStatusUpdate,
)
from storage import Storage, get_storage


logger = logging.getLogger(__name__)


router = APIRouter()


@router.get("", response_model=list[WorkloadAssignmentDetail])
def list_workload_assignments(
    faculty_id: int | None = Query(default=None, alias="facultyId"),
    storage: Storage = Depends(get_storage),
) -> list[WorkloadAssignmentDetail]:
    return storage.list_workload_assignments(faculty_id=faculty_id)


@router.get("/{assignment_id}", response_model=WorkloadAssignmentDetail)
def get_workload_assignment(
    assignment_id: int,
    storage: Storage = Depends(get_storage),
) -> WorkloadAssignmentDetail:
    assignment = storage.get_workload_assignment(assignment_id)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


@router.post("", response_model=WorkloadAssignmentOut, status_code=201)
def create_workload_assignment(
    payload: WorkloadAssignmentCreate,
    storage: Storage = Depends(get_storage),
) -> WorkloadAssignmentOut:
    # The repository bumps the faculty's current hours in the same unit of work.
    assignment = storage.create_workload_assignment(payload.model_dump())
    logger.info(
        "Workload assigned id=%s faculty_id=%s hours=%s",
        assignment.id,
        assignment.faculty_id,
        assignment.hours_per_week,
    )
    return assignment


@router.patch("/{assignment_id}/status", response_model=WorkloadAssignmentOut)
def update_workload_assignment_status(
    assignment_id: int,
    payload: WorkloadAssignmentStatusUpdate,
    storage: Storage = Depends(get_storage),
) -> WorkloadAssignmentOut:
    assignment = storage.update_workload_assignment_status(assignment_id, payload.status)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


@router.delete("/{assignment_id}", response_model=MessageOut)
def delete_workload_assignment(
    assignment_id: int,
    storage: Storage = Depends(get_storage),
) -> MessageOut:
    if not storage.delete_workload_assignment(assignment_id):
        raise HTTPException(status_code=404, detail="Assignment not found")
    logger.info("Workload assignment deleted id=%s", assignment_id)
    return MessageOut(message="Assignment deleted successfully")
