from __future__ import annotations

import sys
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select

from core.database import SessionLocal
from models import ExcelUpload, Faculty, Subject, Division, TimetableSlot, WorkloadAssignment


def main() -> int:
    with SessionLocal() as db:
        for model in (Faculty, Subject, Division, WorkloadAssignment, TimetableSlot, ExcelUpload):
            count = db.execute(select(func.count()).select_from(model)).scalar_one()
            print(f"{model.__tablename__}: {count}")

        hours_total = db.execute(select(func.coalesce(func.sum(Faculty.current_hours), 0))).scalar_one()
        assigned_total = db.execute(
            select(func.coalesce(func.sum(WorkloadAssignment.hours_per_week), 0))
        ).scalar_one()
        # The two sums match unless assignments reference missing faculty.
        print(f"faculty.current_hours total: {hours_total}")
        print(f"workload_assignments.hours_per_week total: {assigned_total}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
