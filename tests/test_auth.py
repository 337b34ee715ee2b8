"""
Tests for accounts, login and the bootstrap admin
"""

from sqlalchemy import text as sa_text

from core.auth import authenticate, hash_password, upsert_user, verify_password
from core.db import init_db
from core.settings import BootstrapAdmin


class TestPasswords:
    """Tests for bcrypt helpers"""

    def test_hash_verifies(self):
        h = hash_password("s3cret!")
        assert h != "s3cret!"
        assert verify_password("s3cret!", h)
        assert not verify_password("wrong", h)

    def test_malformed_hash(self):
        """Test a corrupted stored hash fails closed"""
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestAuthenticate:
    """Tests for authenticate()"""

    def test_admin_login(self, engine, users):
        user = authenticate(engine, "ADMIN@school.test ", "admin-pass")
        assert user == {
            "id": users["admin"]["id"],
            "email": "admin@school.test",
            "full_name": "Maria Admin",
            "roles": ["admin"],
        }

    def test_wrong_password(self, engine, users):
        assert authenticate(engine, "admin@school.test", "nope") is None

    def test_unknown_email(self, engine, users):
        assert authenticate(engine, "ghost@school.test", "admin-pass") is None

    def test_empty_credentials(self, engine, users):
        assert authenticate(engine, "", "") is None

    def test_inactive_account(self, engine, users):
        """Test disabled accounts cannot sign in"""
        with engine.begin() as conn:
            conn.execute(sa_text("UPDATE users SET active = 0 WHERE id = :id"), {"id": users["viewer"]["id"]})
        assert authenticate(engine, "viewer@school.test", "viewer-pass") is None

    def test_upsert_resets_password(self, engine, users):
        """Test upserting an existing email keeps the id and changes the password"""
        with engine.begin() as conn:
            uid = upsert_user(conn, "viewer@school.test", "new-pass", "Joao V.")
        assert uid == users["viewer"]["id"]
        assert authenticate(engine, "viewer@school.test", "viewer-pass") is None
        assert authenticate(engine, "viewer@school.test", "new-pass")["full_name"] == "Joao V."


class TestBootstrapAdmin:
    """Tests for init_db seeding"""

    def test_seeds_admin_once(self, engine):
        boot = BootstrapAdmin(email="root@school.test", password="root-pass", full_name="Root")
        init_db(engine, boot)
        init_db(engine, boot)
        with engine.connect() as conn:
            count = conn.execute(sa_text("SELECT COUNT(*) FROM users WHERE email = 'root@school.test'")).scalar()
        assert count == 1
        user = authenticate(engine, "root@school.test", "root-pass")
        assert user["roles"] == ["admin"]

    def test_disabled_without_password(self, engine):
        init_db(engine, BootstrapAdmin(email="root@school.test"))
        with engine.connect() as conn:
            assert conn.execute(sa_text("SELECT COUNT(*) FROM users")).scalar() == 0
