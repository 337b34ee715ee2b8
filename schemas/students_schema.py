# schemas/students_schema.py
from __future__ import annotations

from sqlalchemy import text as sa_text
from sqlalchemy.engine import Engine
import logging

log = logging.getLogger(__name__)

STUDENT_STATUSES = ("active", "inactive")


def install_schema(engine: Engine) -> None:
    """
    Create (if missing) the students table and its indexes.
    Idempotent: safe to re-run.

    id / created_at / updated_at are assigned by the store layer;
    enrollment uniqueness and the status domain are enforced here.
    """
    ddl = [
        f"""
        CREATE TABLE IF NOT EXISTS students (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL CHECK (length(name) BETWEEN 1 AND 100),
            enrollment TEXT NOT NULL UNIQUE CHECK (length(enrollment) BETWEEN 1 AND 50),
            birth_date DATE NOT NULL,
            email TEXT NOT NULL CHECK (length(email) BETWEEN 1 AND 255),
            status TEXT NOT NULL DEFAULT 'active'
                CHECK (status IN ({", ".join(f"'{s}'" for s in STUDENT_STATUSES)})),
            created_by TEXT,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_students_created_at ON students(created_at)",
        "CREATE INDEX IF NOT EXISTS idx_students_name ON students(lower(name))",
    ]

    with engine.begin() as conn:
        for stmt in ddl:
            conn.execute(sa_text(stmt))
    log.info("students schema installed")
