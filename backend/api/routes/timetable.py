from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.common import MessageOut, dump_updates
from schemas.timetable import TimetableSlotCreate, TimetableSlotDetail, TimetableSlotOut, TimetableSlotUpdate
from storage import Storage, get_storage


router = APIRouter()


@router.get("", response_model=list[TimetableSlotDetail])
def list_timetable_slots(
    division_id: int | None = Query(default=None, alias="divisionId"),
    faculty_id: int | None = Query(default=None, alias="facultyId"),
    storage: Storage = Depends(get_storage),
) -> list[TimetableSlotDetail]:
    # A division filter wins over a faculty filter when both are given.
    if division_id is not None:
        return storage.list_timetable_slots(division_id=division_id)
    return storage.list_timetable_slots(faculty_id=faculty_id)


@router.post("", response_model=TimetableSlotOut, status_code=201)
def create_timetable_slot(
    payload: TimetableSlotCreate,
    storage: Storage = Depends(get_storage),
) -> TimetableSlotOut:
    return storage.create_timetable_slot(payload.model_dump())


@router.patch("/{slot_id}", response_model=TimetableSlotOut)
def update_timetable_slot(
    slot_id: int,
    payload: TimetableSlotUpdate,
    storage: Storage = Depends(get_storage),
) -> TimetableSlotOut:
    current = storage.get_timetable_slot(slot_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Timetable slot not found")

    updates = dump_updates(payload)
    start_time = updates.get("start_time", current.start_time)
    end_time = updates.get("end_time", current.end_time)
    if end_time <= start_time:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Invalid data",
                "errors": [{"field": "endTime", "message": "endTime must be after startTime", "type": "value_error"}],
            },
        )

    slot = storage.update_timetable_slot(slot_id, updates)
    if slot is None:
        raise HTTPException(status_code=404, detail="Timetable slot not found")
    return slot


@router.delete("/{slot_id}", response_model=MessageOut)
def delete_timetable_slot(
    slot_id: int,
    storage: Storage = Depends(get_storage),
) -> MessageOut:
    if not storage.delete_timetable_slot(slot_id):
        raise HTTPException(status_code=404, detail="Timetable slot not found")
    return MessageOut(message="Timetable slot deleted successfully")
