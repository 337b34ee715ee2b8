# screens/students/db.py
from __future__ import annotations

import datetime
import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import text as sa_text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.errors import NotAuthenticatedError, StoreError
from core.policy import EDIT_ROLES, current_user
from screens.students.models import StudentRecord

log = logging.getLogger(__name__)

STUDENT_COLUMNS = "id, name, enrollment, birth_date, email, status, created_by, created_at, updated_at"


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="microseconds")


def _integrity_message(e: IntegrityError) -> str:
    msg = str(getattr(e, "orig", e)).lower()
    if "unique" in msg and "enrollment" in msg:
        return "A student with this enrollment already exists."
    if "check" in msg:
        return "One or more fields are outside the allowed values."
    return "The record violates a database constraint."


class StudentStore:
    """
    Record store for the students table plus the profile/role lookups the
    dashboard header needs.

    Every database failure leaves this class as StoreError. Mutations are
    authorized here against user_roles, independently of what the UI shows.
    """

    def __init__(self, engine: Engine, session_user: Callable[[], Mapping[str, Any]] = current_user):
        self.engine = engine
        self._session_user = session_user

    # ── session / profile ──────────────────────────────────────────────────
    def get_current_user(self) -> Optional[Dict[str, Any]]:
        user = self._session_user() or {}
        return dict(user) if user.get("id") else None

    def get_user_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        row = self._fetchone(
            "SELECT full_name FROM profiles WHERE id = :id", {"id": user_id}
        )
        return {"display_name": row[0] or ""} if row else None

    def get_user_role(self, user_id: str) -> Optional[Dict[str, Any]]:
        """The single role used by the dashboard; admin wins when a user holds several."""
        row = self._fetchone("""
            SELECT role FROM user_roles WHERE user_id = :id
            ORDER BY CASE WHEN role = 'admin' THEN 0 ELSE 1 END, role
            LIMIT 1
        """, {"id": user_id})
        return {"role": row[0]} if row else None

    # ── students ───────────────────────────────────────────────────────────
    def list_records(self) -> List[StudentRecord]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(sa_text(f"""
                    SELECT {STUDENT_COLUMNS}
                    FROM students
                    ORDER BY created_at DESC, id DESC
                """)).fetchall()
        except SQLAlchemyError as e:
            log.exception("list_records failed")
            raise StoreError(f"Could not load students: {e.__class__.__name__}") from e
        return [StudentRecord.from_row(r._mapping) for r in rows]

    def get_record(self, record_id: str) -> Optional[StudentRecord]:
        row = self._fetchone(
            f"SELECT {STUDENT_COLUMNS} FROM students WHERE id = :id", {"id": record_id}
        )
        return StudentRecord.from_row(row._mapping) if row else None

    def insert_record(self, fields: Mapping[str, Any], created_by: str) -> StudentRecord:
        if not created_by:
            raise NotAuthenticatedError()
        now = _now()
        params = self._write_params(fields)
        params.update({"id": str(uuid.uuid4()), "created_by": created_by, "now": now})

        def _op(conn: Connection) -> None:
            conn.execute(sa_text("""
                INSERT INTO students (id, name, enrollment, birth_date, email, status,
                                      created_by, created_at, updated_at)
                VALUES (:id, :name, :enrollment, :birth_date, :email, :status,
                        :created_by, :now, :now)
            """), params)

        self._mutate("insert", _op)
        log.info("student %s inserted by %s", params["id"], created_by)
        return self.get_record(params["id"])

    def update_record(self, record_id: str, fields: Mapping[str, Any]) -> None:
        params = self._write_params(fields)
        params.update({"id": record_id, "now": _now()})

        def _op(conn: Connection) -> None:
            res = conn.execute(sa_text("""
                UPDATE students
                SET name = :name, enrollment = :enrollment, birth_date = :birth_date,
                    email = :email, status = :status, updated_at = :now
                WHERE id = :id
            """), params)
            if res.rowcount == 0:
                raise StoreError("Student not found.")

        self._mutate("update", _op)
        log.info("student %s updated", record_id)

    def delete_record(self, record_id: str) -> None:
        def _op(conn: Connection) -> None:
            res = conn.execute(sa_text("DELETE FROM students WHERE id = :id"), {"id": record_id})
            if res.rowcount == 0:
                raise StoreError("Student not found.")

        self._mutate("delete", _op)
        log.info("student %s deleted", record_id)

    # ── helpers ────────────────────────────────────────────────────────────
    @staticmethod
    def _write_params(fields: Mapping[str, Any]) -> Dict[str, Any]:
        birth = fields.get("birth_date")
        return {
            "name": fields.get("name"),
            "enrollment": fields.get("enrollment"),
            "birth_date": birth.isoformat() if isinstance(birth, datetime.date) else birth,
            "email": fields.get("email"),
            "status": fields.get("status"),
        }

    def _fetchone(self, sql: str, params: Dict[str, Any]):
        try:
            with self.engine.connect() as conn:
                return conn.execute(sa_text(sql), params).fetchone()
        except SQLAlchemyError as e:
            log.exception("query failed")
            raise StoreError(f"Database error: {e.__class__.__name__}") from e

    def _require_editor(self, conn: Connection) -> str:
        user = self.get_current_user()
        if not user:
            raise NotAuthenticatedError()
        roles = {r[0] for r in conn.execute(
            sa_text("SELECT role FROM user_roles WHERE user_id = :u"), {"u": user["id"]}
        ).fetchall()}
        if not roles & EDIT_ROLES:
            raise StoreError("Permission denied: only administrators can change student records.")
        return user["id"]

    def _mutate(self, action: str, op: Callable[[Connection], None]) -> None:
        try:
            with self.engine.begin() as conn:
                self._require_editor(conn)
                op(conn)
        except StoreError:
            raise
        except IntegrityError as e:
            log.warning("%s rejected by constraint: %s", action, e.orig)
            raise StoreError(_integrity_message(e)) from e
        except SQLAlchemyError as e:
            log.exception("%s failed", action)
            raise StoreError(f"Could not {action} student: {e.__class__.__name__}") from e
