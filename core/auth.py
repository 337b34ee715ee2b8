# core/auth.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

import bcrypt
import streamlit as st
from sqlalchemy import text as sa_text
from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)

SESSION_USER_KEY = "user"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash in the table
        return False


def get_user_id(conn: Connection, email: str) -> Optional[str]:
    row = conn.execute(
        sa_text("SELECT id FROM users WHERE lower(email) = lower(:e)"),
        {"e": email.strip()},
    ).fetchone()
    return row[0] if row else None


def upsert_user(conn: Connection, email: str, password: str, full_name: str = "") -> str:
    """Create the account (or reset its password) and make sure a profile row exists."""
    email = email.strip().lower()
    uid = get_user_id(conn, email)
    pw_hash = hash_password(password)
    if uid is None:
        uid = str(uuid.uuid4())
        conn.execute(
            sa_text("INSERT INTO users (id, email, password_hash, active) VALUES (:id, :e, :h, 1)"),
            {"id": uid, "e": email, "h": pw_hash},
        )
    else:
        conn.execute(
            sa_text("UPDATE users SET password_hash = :h, active = 1 WHERE id = :id"),
            {"h": pw_hash, "id": uid},
        )
    conn.execute(sa_text("""
        INSERT INTO profiles (id, full_name) VALUES (:id, :n)
        ON CONFLICT(id) DO UPDATE SET full_name = excluded.full_name, updated_at = CURRENT_TIMESTAMP
    """), {"id": uid, "n": full_name.strip()})
    return uid


def grant_role(conn: Connection, user_id: str, role: str) -> None:
    conn.execute(
        sa_text("INSERT INTO user_roles (user_id, role) VALUES (:u, :r) ON CONFLICT(user_id, role) DO NOTHING"),
        {"u": user_id, "r": role},
    )


def authenticate(engine: Engine, email: str, password: str) -> Optional[Dict[str, Any]]:
    """
    Check credentials and return the session identity, or None.
    Unknown email and wrong password are indistinguishable to the caller.
    """
    if not email or not password:
        return None
    with engine.connect() as conn:
        row = conn.execute(sa_text("""
            SELECT u.id, u.email, u.password_hash, COALESCE(p.full_name, '') AS full_name
            FROM users u
            LEFT JOIN profiles p ON p.id = u.id
            WHERE lower(u.email) = lower(:e) AND u.active = 1
        """), {"e": email.strip()}).fetchone()
        if not row or not verify_password(password, row.password_hash):
            log.info("failed login for %s", email.strip().lower())
            return None
        roles = [r[0] for r in conn.execute(
            sa_text("SELECT role FROM user_roles WHERE user_id = :u ORDER BY role"),
            {"u": row.id},
        ).fetchall()]
    log.info("login ok for %s (roles=%s)", row.email, ",".join(roles) or "-")
    return {"id": row.id, "email": row.email, "full_name": row.full_name, "roles": roles}


def login(user: Dict[str, Any]) -> None:
    st.session_state[SESSION_USER_KEY] = user


def logout() -> None:
    for key in list(st.session_state.keys()):
        del st.session_state[key]


def session_user() -> Optional[Dict[str, Any]]:
    return st.session_state.get(SESSION_USER_KEY) or None
