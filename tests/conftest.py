"""
Shared test fixtures for pytest
"""

import datetime

import pytest

from core.auth import grant_role, upsert_user
from core.db import get_engine, init_db
from core.errors import StoreError
from core.logs import setup_logging
from screens.students.db import StudentStore
from screens.students.models import StudentRecord


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for all tests"""
    setup_logging("DEBUG")


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'students.db'}"


@pytest.fixture
def engine(db_url):
    """SQLite database with every schema installed"""
    eng = get_engine(db_url)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def users(engine):
    """One admin and one plain user; returns their session identities"""
    with engine.begin() as conn:
        admin_id = upsert_user(conn, "admin@school.test", "admin-pass", "Maria Admin")
        grant_role(conn, admin_id, "admin")
        viewer_id = upsert_user(conn, "viewer@school.test", "viewer-pass", "Joao Viewer")
        grant_role(conn, viewer_id, "user")
    return {
        "admin": {"id": admin_id, "email": "admin@school.test", "full_name": "Maria Admin", "roles": ["admin"]},
        "viewer": {"id": viewer_id, "email": "viewer@school.test", "full_name": "Joao Viewer", "roles": ["user"]},
    }


@pytest.fixture
def admin_store(engine, users):
    return StudentStore(engine, session_user=lambda: users["admin"])


@pytest.fixture
def viewer_store(engine, users):
    return StudentStore(engine, session_user=lambda: users["viewer"])


@pytest.fixture
def anonymous_store(engine, users):
    return StudentStore(engine, session_user=lambda: {})


@pytest.fixture
def student_fields():
    return {
        "name": "Ana Silva",
        "enrollment": "2024001",
        "birth_date": datetime.date(2008, 3, 14),
        "email": "ana.silva@school.test",
        "status": "active",
    }


def make_record(id, name, enrollment, status="active", **kw):
    return StudentRecord(
        id=id,
        name=name,
        enrollment=enrollment,
        birth_date=kw.get("birth_date", datetime.date(2008, 1, 1)),
        email=kw.get("email", f"{id}@school.test"),
        status=status,
    )


@pytest.fixture
def sample_records():
    """The two-student collection used by the search scenarios"""
    return [
        make_record("s1", "Ana Silva", "2024001", "active"),
        make_record("s2", "Bruno Souza", "2024002", "inactive"),
    ]


class FakeStore:
    """
    In-memory record store that records every call.
    Set `fail_on` to a method name to make that call raise StoreError.
    """

    def __init__(self, records=None, user=None, profile=None, role=None):
        self.records = list(records or [])
        self.user = user
        self.profile = profile
        self.role = role
        self.calls = []
        self.fail_on = set()
        self._next_id = 100

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise StoreError(f"{name} failed")

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]

    def get_current_user(self):
        self._call("get_current_user")
        return self.user

    def get_user_profile(self, user_id):
        self._call("get_user_profile", user_id)
        return self.profile

    def get_user_role(self, user_id):
        self._call("get_user_role", user_id)
        return self.role

    def list_records(self):
        self._call("list_records")
        return list(self.records)

    def insert_record(self, fields, created_by):
        self._call("insert_record", dict(fields), created_by)
        self._next_id += 1
        rec = StudentRecord(id=f"s{self._next_id}", created_by=created_by, **fields)
        self.records.insert(0, rec)
        return rec

    def update_record(self, record_id, fields):
        self._call("update_record", record_id, dict(fields))
        self.records = [
            StudentRecord(id=r.id, created_by=r.created_by, **fields) if r.id == record_id else r
            for r in self.records
        ]

    def delete_record(self, record_id):
        self._call("delete_record", record_id)
        self.records = [r for r in self.records if r.id != record_id]


@pytest.fixture
def admin_fake(sample_records):
    return FakeStore(
        records=sample_records,
        user={"id": "u-admin", "email": "admin@school.test"},
        profile={"display_name": "Maria Admin"},
        role={"role": "admin"},
    )


@pytest.fixture
def viewer_fake(sample_records):
    return FakeStore(
        records=sample_records,
        user={"id": "u-viewer", "email": "viewer@school.test"},
        profile={"display_name": "Joao Viewer"},
        role={"role": "user"},
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def fake_store_factory():
    return FakeStore
