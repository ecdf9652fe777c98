from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.common import MessageOut, dump_updates
from schemas.division import DivisionCreate, DivisionOut, DivisionUpdate
from storage import Storage, get_storage


router = APIRouter()


@router.get("", response_model=list[DivisionOut])
def list_divisions(
    department: str | None = Query(default=None),
    storage: Storage = Depends(get_storage),
) -> list[DivisionOut]:
    return storage.list_divisions(department=department)


@router.get("/{division_id}", response_model=DivisionOut)
def get_division(
    division_id: int,
    storage: Storage = Depends(get_storage),
) -> DivisionOut:
    division = storage.get_division(division_id)
    if division is None:
        raise HTTPException(status_code=404, detail="Division not found")
    return division


@router.post("", response_model=DivisionOut, status_code=201)
def create_division(
    payload: DivisionCreate,
    storage: Storage = Depends(get_storage),
) -> DivisionOut:
    return storage.create_division(payload.model_dump())


@router.patch("/{division_id}", response_model=DivisionOut)
def update_division(
    division_id: int,
    payload: DivisionUpdate,
    storage: Storage = Depends(get_storage),
) -> DivisionOut:
    division = storage.update_division(division_id, dump_updates(payload, nullable={"code"}))
    if division is None:
        raise HTTPException(status_code=404, detail="Division not found")
    return division


@router.delete("/{division_id}", response_model=MessageOut)
def delete_division(
    division_id: int,
    storage: Storage = Depends(get_storage),
) -> MessageOut:
    if not storage.delete_division(division_id):
        raise HTTPException(status_code=404, detail="Division not found")
    return MessageOut(message="Division deleted successfully")
