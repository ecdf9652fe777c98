from __future__ import annotations

"""Create the schema and load the demo roster (faculty, subjects, divisions, assignments).

Safe to run multiple times: seeding is skipped when faculty rows already exist.
``--reset`` drops every table first and requires ``--yes``.
"""

import argparse
import sys
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.bootstrap import ensure_schema, seed_sample_data
from core.config import settings
from core.database import ENGINE
from models.base import Base
from storage import storage_session


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    parser.add_argument("--yes", action="store_true", help="Confirm destructive changes (needed with --reset)")
    args = parser.parse_args()

    if settings.storage_backend != "sql":
        print("STORAGE_BACKEND is not 'sql'; nothing to seed.")
        return 1

    if args.reset:
        if not args.yes:
            print("Refusing to drop tables without --yes.")
            return 2
        Base.metadata.drop_all(ENGINE)
        print("Dropped all tables.")

    ensure_schema()
    with storage_session() as storage:
        seeded = seed_sample_data(storage)

    print("Seeded sample data." if seeded else "Data already present; skipped seeding.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
