from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.common import MessageOut, dump_updates
from schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from storage import Storage, get_storage


router = APIRouter()


@router.get("", response_model=list[SubjectOut])
def list_subjects(
    department: str | None = Query(default=None),
    storage: Storage = Depends(get_storage),
) -> list[SubjectOut]:
    return storage.list_subjects(department=department)


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(
    subject_id: int,
    storage: Storage = Depends(get_storage),
) -> SubjectOut:
    subject = storage.get_subject(subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="Subject not found")
    return subject


@router.post("", response_model=SubjectOut, status_code=201)
def create_subject(
    payload: SubjectCreate,
    storage: Storage = Depends(get_storage),
) -> SubjectOut:
    return storage.create_subject(payload.model_dump())


@router.patch("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    storage: Storage = Depends(get_storage),
) -> SubjectOut:
    subject = storage.update_subject(subject_id, dump_updates(payload, nullable={"semester"}))
    if subject is None:
        raise HTTPException(status_code=404, detail="Subject not found")
    return subject


@router.delete("/{subject_id}", response_model=MessageOut)
def delete_subject(
    subject_id: int,
    storage: Storage = Depends(get_storage),
) -> MessageOut:
    if not storage.delete_subject(subject_id):
        raise HTTPException(status_code=404, detail="Subject not found")
    return MessageOut(message="Subject deleted successfully")
