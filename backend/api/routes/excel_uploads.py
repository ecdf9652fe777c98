from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Query, UploadFile

from core.config import settings
from schemas.common import MessageOut
from schemas.excel_upload import ExcelUploadCreate, ExcelUploadOut, ExcelUploadStatusUpdate
from services.excel_import import run_roster_import, stored_filename
from storage import Storage, get_storage


logger = logging.getLogger(__name__)


router = APIRouter()


_CHUNK_SIZE = 1024 * 1024


def _save_upload(file: UploadFile, dest: Path) -> int:
    """Stream ``file`` to ``dest`` and return its size, enforcing the upload limit."""

    size = 0
    with dest.open("wb") as out:
        while True:
            chunk = file.file.read(_CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > settings.max_upload_bytes:
                out.close()
                dest.unlink(missing_ok=True)
                raise HTTPException(status_code=413, detail="File too large")
            out.write(chunk)
    return size


@router.get("", response_model=list[ExcelUploadOut])
def list_excel_uploads(
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
    storage: Storage = Depends(get_storage),
) -> list[ExcelUploadOut]:
    return storage.list_excel_uploads(include_deleted=include_deleted)


@router.post("", response_model=ExcelUploadOut, status_code=201)
def create_excel_upload(
    payload: ExcelUploadCreate,
    storage: Storage = Depends(get_storage),
) -> ExcelUploadOut:
    return storage.create_excel_upload(payload.model_dump())


@router.post("/file", response_model=ExcelUploadOut, status_code=201)
def upload_roster_workbook(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    storage: Storage = Depends(get_storage),
) -> ExcelUploadOut:
    original_name = Path(file.filename or "").name
    if not original_name.lower().endswith(".xlsx"):
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Invalid data",
                "errors": [{"field": "file", "message": "Only .xlsx workbooks are supported", "type": "value_error"}],
            },
        )

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = stored_filename(original_name)
    dest = upload_dir / filename
    size = _save_upload(file, dest)

    try:
        upload = storage.create_excel_upload({"filename": filename, "original_name": original_name, "file_size": size})
    except Exception:
        dest.unlink(missing_ok=True)
        raise
    logger.info("Workbook stored upload_id=%s file=%s bytes=%d", upload.id, dest, size)

    # Runs after the response is sent; the client polls the upload list for the outcome.
    background_tasks.add_task(run_roster_import, upload.id, dest)
    return upload


@router.patch("/{upload_id}/status", response_model=ExcelUploadOut)
def update_excel_upload_status(
    upload_id: int,
    payload: ExcelUploadStatusUpdate,
    storage: Storage = Depends(get_storage),
) -> ExcelUploadOut:
    upload = storage.update_excel_upload_status(
        upload_id,
        payload.status,
        processed_rows=payload.processed_rows,
        total_rows=payload.total_rows,
    )
    if upload is None:
        raise HTTPException(status_code=404, detail="Excel upload not found")
    return upload


@router.delete("/{upload_id}", response_model=MessageOut)
def delete_excel_upload(
    upload_id: int,
    storage: Storage = Depends(get_storage),
) -> MessageOut:
    if storage.update_excel_upload_status(upload_id, "deleted") is None:
        raise HTTPException(status_code=404, detail="Excel upload not found")
    return MessageOut(message="Upload deleted successfully")
