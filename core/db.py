# core/db.py
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from core.settings import BootstrapAdmin
from schemas.students_schema import install_schema as _install_students
from schemas.users_schema import install_schema as _install_users

log = logging.getLogger(__name__)

_engines: Dict[str, Engine] = {}
_lock = threading.Lock()

# Order matters: students.created_by points at users
INSTALLERS = (_install_users, _install_students)


def _enable_sqlite_fks(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def get_engine(url: str) -> Engine:
    """One engine per URL for the whole process (Streamlit reruns share it)."""
    with _lock:
        engine = _engines.get(url)
        if engine is None:
            kwargs = {"future": True, "pool_pre_ping": True}
            if url.startswith("sqlite"):
                # the dashboard loads user and students from two worker threads
                kwargs["connect_args"] = {"check_same_thread": False}
            engine = create_engine(url, **kwargs)
            if engine.dialect.name == "sqlite":
                event.listen(engine, "connect", _enable_sqlite_fks)
            _engines[url] = engine
            log.info("engine created for %s", engine.url.render_as_string(hide_password=True))
        return engine


def init_db(engine: Engine, bootstrap: Optional[BootstrapAdmin] = None) -> None:
    for install in INSTALLERS:
        install(engine)
    if bootstrap is not None and bootstrap.enabled:
        _seed_admin(engine, bootstrap)


def _seed_admin(engine: Engine, bootstrap: BootstrapAdmin) -> None:
    from core.auth import get_user_id, grant_role, upsert_user

    with engine.begin() as conn:
        uid = get_user_id(conn, bootstrap.email)
        if uid is None:
            uid = upsert_user(conn, bootstrap.email, bootstrap.password, bootstrap.full_name)
            log.info("bootstrap admin %s created", bootstrap.email)
        grant_role(conn, uid, "admin")
