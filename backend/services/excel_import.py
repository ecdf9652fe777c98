"""Faculty roster import from .xlsx workbooks.

The first sheet must have a header row containing (in any order, any case)
``name``, ``email``, ``position`` and ``department``. Every following
non-empty row becomes one faculty record. Rows that fail validation or repeat
an existing email are skipped and reported, they never abort the import.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError

from schemas.faculty import FacultyCreate
from services.workload import max_hours_for_position
from storage import storage_session
from storage.base import DuplicateKeyError, Storage


logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = ("name", "email", "position", "department")

_HEADER_ALIASES = {
    "faculty_name": "name",
    "full_name": "name",
    "email_address": "email",
    "e_mail": "email",
    "designation": "position",
    "dept": "department",
}

_POSITION_ALIASES = {
    "prof": "professor",
    "assoc_professor": "associate_professor",
    "assoc_prof": "associate_professor",
    "asst_professor": "assistant_professor",
    "asst_prof": "assistant_professor",
}


class RosterImportError(Exception):
    """The workbook as a whole cannot be imported (unreadable, empty, wrong columns)."""


@dataclass(frozen=True)
class SkippedRow:
    row_number: int
    reason: str


@dataclass
class RosterImportResult:
    total_rows: int = 0
    imported_rows: int = 0
    skipped: list[SkippedRow] = field(default_factory=list)


def _slug(value: object) -> str:
    return re.sub(r"[^a-z0-9]+", "_", str(value or "").strip().lower()).strip("_")


def normalize_header(value: object) -> str:
    key = _slug(value)
    return _HEADER_ALIASES.get(key, key)


def normalize_position(value: object) -> str:
    # "Associate Professor", "associate-professor" and "Assoc Prof" all map to associate_professor.
    key = _slug(value)
    return _POSITION_ALIASES.get(key, key)


def stored_filename(original_name: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", Path(original_name).name).strip("._") or "upload.xlsx"
    return f"{int(time.time() * 1000)}_{safe}"


def iter_roster_rows(path: Path) -> Iterator[tuple[int, dict[str, str]]]:
    """Yield ``(sheet_row_number, {column: text})`` for each non-empty data row."""

    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as exc:
        raise RosterImportError("File is not a readable .xlsx workbook") from exc

    try:
        rows = workbook.active.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            raise RosterImportError("Workbook is empty")

        columns = [normalize_header(h) for h in header]
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise RosterImportError(f"Missing required columns: {', '.join(missing)}")

        for row_number, values in enumerate(rows, start=2):
            cells = ["" if v is None else str(v).strip() for v in values]
            if not any(cells):
                continue
            yield row_number, dict(zip(columns, cells))
    finally:
        workbook.close()


def import_faculty_roster(storage: Storage, path: Path) -> RosterImportResult:
    result = RosterImportResult()

    for row_number, row in iter_roster_rows(path):
        result.total_rows += 1
        try:
            payload = FacultyCreate.model_validate(
                {
                    "name": row.get("name", ""),
                    "email": row.get("email", ""),
                    "position": normalize_position(row.get("position", "")),
                    "department": row.get("department", ""),
                }
            )
        except ValidationError as exc:
            reason = "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors())
            result.skipped.append(SkippedRow(row_number, reason))
            continue

        data = payload.model_dump()
        data["max_hours"] = max_hours_for_position(payload.position)
        try:
            storage.create_faculty(data)
        except DuplicateKeyError:
            result.skipped.append(SkippedRow(row_number, f"duplicate email {payload.email}"))
            continue
        result.imported_rows += 1

    return result


def _record_outcome(storage: Storage, upload_id: int, status: str, **fields) -> None:
    if storage.finish_excel_upload(upload_id, status, **fields) is None:
        logger.info("Upload upload_id=%s was deleted during import; %s not recorded", upload_id, status)


def run_roster_import(upload_id: int, path: Path) -> None:
    """Background job: import ``path`` and record the outcome on the upload row.

    An upload deleted while the job runs stays deleted.
    """

    with storage_session() as storage:
        try:
            result = import_faculty_roster(storage, path)
        except RosterImportError as exc:
            logger.warning("Roster import failed upload_id=%s path=%s: %s", upload_id, path, exc)
            _record_outcome(storage, upload_id, "error", error_message=str(exc))
            return
        except Exception:
            logger.exception("Roster import crashed upload_id=%s path=%s", upload_id, path)
            _record_outcome(storage, upload_id, "error", error_message="Import failed unexpectedly")
            return

        _record_outcome(
            storage,
            upload_id,
            "completed",
            processed_rows=result.imported_rows,
            total_rows=result.total_rows,
        )
        logger.info(
            "Roster import finished upload_id=%s total=%d imported=%d skipped=%d",
            upload_id,
            result.total_rows,
            result.imported_rows,
            len(result.skipped),
        )
        for skipped in result.skipped:
            logger.debug("Roster row %d skipped: %s", skipped.row_number, skipped.reason)
