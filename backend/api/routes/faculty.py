from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.common import MessageOut, dump_updates
from schemas.faculty import FacultyCreate, FacultyOut, FacultyUpdate
from schemas.workload import FacultyWithWorkload
from services.workload import max_hours_for_position
from storage import Storage, get_storage


router = APIRouter()


@router.get("", response_model=list[FacultyOut])
def list_faculty(
    department: str | None = Query(default=None),
    storage: Storage = Depends(get_storage),
) -> list[FacultyOut]:
    return storage.list_faculty(department=department)


@router.get("/{faculty_id}", response_model=FacultyWithWorkload)
def get_faculty(
    faculty_id: int,
    storage: Storage = Depends(get_storage),
) -> FacultyWithWorkload:
    faculty = storage.get_faculty_with_workload(faculty_id)
    if faculty is None:
        raise HTTPException(status_code=404, detail="Faculty not found")
    return faculty


@router.post("", response_model=FacultyOut, status_code=201)
def create_faculty(
    payload: FacultyCreate,
    storage: Storage = Depends(get_storage),
) -> FacultyOut:
    data = payload.model_dump()
    # The position table is authoritative for the weekly ceiling.
    data["max_hours"] = max_hours_for_position(payload.position)
    return storage.create_faculty(data)


@router.patch("/{faculty_id}", response_model=FacultyOut)
def update_faculty(
    faculty_id: int,
    payload: FacultyUpdate,
    storage: Storage = Depends(get_storage),
) -> FacultyOut:
    updates = dump_updates(payload)
    if "position" in updates and "max_hours" not in updates:
        updates["max_hours"] = max_hours_for_position(updates["position"])

    faculty = storage.update_faculty(faculty_id, updates)
    if faculty is None:
        raise HTTPException(status_code=404, detail="Faculty not found")
    return faculty


@router.delete("/{faculty_id}", response_model=MessageOut)
def delete_faculty(
    faculty_id: int,
    storage: Storage = Depends(get_storage),
) -> MessageOut:
    if not storage.delete_faculty(faculty_id):
        raise HTTPException(status_code=404, detail="Faculty not found")
    return MessageOut(message="Faculty deleted successfully")
