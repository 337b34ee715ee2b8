"""
Tests for the Streamlit screens, run through streamlit's AppTest
"""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP_PATH = str(Path(__file__).resolve().parents[1] / "app.py")


@pytest.fixture
def app_env(monkeypatch, db_url, engine):
    """Point app.py at the test database; no bootstrap admin"""
    monkeypatch.setenv("STUDENTS_DB_URL", db_url)
    for name in ("STUDENTS_ADMIN_EMAIL", "STUDENTS_ADMIN_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
    return engine


@pytest.fixture
def seeded(app_env, admin_store, users, student_fields):
    """Two students in the database"""
    admin_store.insert_record(student_fields, created_by=users["admin"]["id"])
    admin_store.insert_record(
        {**student_fields, "name": "Bruno Souza", "enrollment": "2024002", "status": "inactive"},
        created_by=users["admin"]["id"],
    )
    return users


def _app(user=None):
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    if user is not None:
        at.session_state["user"] = user
    return at


def _labels(at):
    return [b.label for b in at.button]


class TestDashboardScreen:
    """Tests for the students dashboard"""

    def test_admin_sees_mutation_controls(self, seeded):
        """Test admin gets New Student plus edit/delete on every row"""
        at = _app(seeded["admin"]).run()

        assert not at.exception
        labels = _labels(at)
        assert "➕ New Student" in labels
        assert labels.count("✏️") == 2
        assert labels.count("🗑️") == 2

    def test_admin_header_shows_name_and_role(self, seeded):
        """Test the header resolves the signed-in user's profile and role"""
        at = _app(seeded["admin"]).run()

        assert any("Maria Admin" in m.value for m in at.markdown)
        assert any(c.value == "Admin" for c in at.caption)

    def test_viewer_sees_no_mutation_controls(self, seeded):
        """Test viewer gets the read-only table and no mutation buttons"""
        at = _app(seeded["viewer"]).run()

        assert not at.exception
        labels = _labels(at)
        assert "➕ New Student" not in labels
        assert "✏️" not in labels
        assert "🗑️" not in labels
        assert len(at.dataframe) == 1
        assert len(at.dataframe[0].value) == 2

    def test_search_filters_rows(self, seeded):
        """Test typing a term narrows the table"""
        at = _app(seeded["admin"]).run()
        at.text_input(key="students__search").input("silva").run()

        assert _labels(at).count("✏️") == 1

    def test_empty_collection_message(self, app_env, users):
        """Test the empty state when no students exist"""
        at = _app(users["admin"]).run()

        assert any(i.value == "No students found" for i in at.info)

    def test_logout_returns_to_landing(self, seeded):
        """Test logging out clears the session"""
        at = _app(seeded["admin"]).run()
        at.button(key="header__logout").click().run()

        assert "user" not in at.session_state
        assert "Access system" in _labels(at)


class TestLoginScreen:
    """Tests for landing and login"""

    def test_landing_login_dashboard(self, seeded):
        """Test landing -> login -> dashboard with the seeded admin"""
        at = _app().run()
        assert "Access system" in _labels(at)

        at.button(key="landing__enter").click().run()
        at.text_input(key="login__email").input("admin@school.test")
        at.text_input(key="login__password").input("admin-pass")
        next(b for b in at.button if b.label == "Sign in").click().run()

        assert not at.exception
        assert at.session_state["user"]["email"] == "admin@school.test"
        assert "➕ New Student" in _labels(at)

    def test_wrong_password(self, seeded):
        """Test bad credentials keep the user on the login screen"""
        at = _app().run()
        at.button(key="landing__enter").click().run()
        at.text_input(key="login__email").input("admin@school.test")
        at.text_input(key="login__password").input("wrong")
        next(b for b in at.button if b.label == "Sign in").click().run()

        assert "user" not in at.session_state
        assert any(e.value == "Invalid email or password." for e in at.error)
