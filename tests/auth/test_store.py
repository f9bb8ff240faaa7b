"""Tests for SqliteMemberStore."""

import pytest

from camp_core.auth.schemas import Role
from camp_core.auth.store import SqliteMemberStore
from camp_core.db import init_db
from camp_core.exceptions import DatabaseError, DuplicateEmail

MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture
def sqlite_store(db_path):
    init_db(db_path)
    return SqliteMemberStore(db_path)


class TestSqliteMemberStore:
    """Each operation commits on its own."""

    def test_create_and_find(self, sqlite_store):
        created = sqlite_store.create(email="Alice@X.com", name="Alice", role=Role.MANAGER)

        assert sqlite_store.find_by_id(created.id).email == "alice@x.com"
        assert sqlite_store.find_by_email(" ALICE@x.com").id == created.id

    def test_create_duplicate(self, sqlite_store):
        sqlite_store.create(email="alice@x.com", name="Alice")

        with pytest.raises(DuplicateEmail):
            sqlite_store.create(email="alice@x.com", name="Alice")

    def test_updates_return_updated_member(self, sqlite_store):
        member = sqlite_store.create(email="alice@x.com", name="Alice")

        assert sqlite_store.update_password_hash(member.id, "$2b$04$x", email_verified=True).email_verified
        assert not sqlite_store.update_active(member.id, False).is_active
        assert sqlite_store.update_role(member.id, Role.ADMIN).role == Role.ADMIN
        assert sqlite_store.update_profile(member.id, {"phone": "555-0100"}).phone == "555-0100"

    def test_first_password_write_is_conditional(self, sqlite_store):
        member = sqlite_store.create(email="alice@x.com", name="Alice")

        assert sqlite_store.update_password_hash(member.id, "$2b$04$a", only_if_unset=True) is not None
        assert sqlite_store.update_password_hash(member.id, "$2b$04$b", only_if_unset=True) is None
        assert sqlite_store.find_by_id(member.id).password_hash == "$2b$04$a"

    def test_updates_on_missing_member_return_none(self, sqlite_store):
        assert sqlite_store.update_password_hash(MISSING_ID, "x") is None
        assert sqlite_store.update_active(MISSING_ID, True) is None
        assert sqlite_store.update_role(MISSING_ID, Role.ADMIN) is None
        assert sqlite_store.update_profile(MISSING_ID, {"name": "Ghost"}) is None

    def test_list_pending(self, sqlite_store):
        sqlite_store.create(email="pending@x.com", name="Pending")
        sqlite_store.create(email="active@x.com", name="Active", password_hash="$2b$04$x")

        members, total = sqlite_store.list_pending()

        assert total == 1
        assert members[0].email == "pending@x.com"

    def test_storage_failure_becomes_database_error(self, tmp_path):
        """A database without the schema surfaces as a generic DatabaseError."""
        store = SqliteMemberStore(str(tmp_path / "empty.db"))

        with pytest.raises(DatabaseError) as exc_info:
            store.find_by_email("alice@x.com")

        assert exc_info.value.message == "Database operation failed"
        assert exc_info.value.status_code == 500
