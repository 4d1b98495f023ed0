"""Tests for posada.services.store.SQLStore against an in-memory SQLite database."""

import unittest
import uuid
from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from posada.core.database import create_session_factory
from posada.core.errors import NoRowError, StoreError, UniqueViolationError
from posada.models import ROLE_ADMIN, ROLE_CUSTOMER
from posada.services.store import (
    CreateSessionParams,
    CreateUserParams,
    SQLStore,
    UpdateUserParams,
)
from support import REFRESH_DURATION, T0, sqlite_engine


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = sqlite_engine()
        self.db = create_session_factory(self.engine)()
        self.store = SQLStore(self.db)

        self.extra_sessions = []

    def tearDown(self) -> None:
        for db in self.extra_sessions:
            db.close()
        self.db.close()
        self.engine.dispose()

    def other_store(self) -> SQLStore:
        """A store on a second DB session, as a concurrent request would have."""
        db = create_session_factory(self.engine)()
        self.extra_sessions.append(db)
        return SQLStore(db)

    def create_user(self, username: str = "alice", role_name: str = ROLE_CUSTOMER):
        role = self.store.get_role_by_name(role_name)
        return self.store.create_user(
            CreateUserParams(
                username=username,
                hashed_password="hashed",
                full_name="Alice Example",
                email=f"{username}@example.com",
                role_id=role.internal_id,
            )
        )

    def session_params(self, username: str = "alice", **overrides) -> CreateSessionParams:
        values = {
            "id": uuid.uuid4(),
            "username": username,
            "refresh_token": "refresh-token",
            "user_agent": "testclient",
            "client_ip": "127.0.0.1",
            "is_blocked": False,
            "expired_at": T0 + REFRESH_DURATION,
            "created_at": T0,
        }
        values.update(overrides)
        return CreateSessionParams(**values)


class TestUsers(StoreTestCase):
    def test_create_and_get_user_with_role(self) -> None:
        created = self.create_user()
        self.assertEqual(created.role.name, ROLE_CUSTOMER)
        fetched = self.store.get_user("alice")
        self.assertEqual(fetched.username, "alice")
        self.assertEqual(fetched.role.name, ROLE_CUSTOMER)
        self.assertFalse(fetched.is_deleted)
        self.assertIsNotNone(fetched.created_at.tzinfo)

    def test_get_missing_user(self) -> None:
        with self.assertRaises(NoRowError):
            self.store.get_user("ghost")

    def test_duplicate_username(self) -> None:
        self.create_user()
        other = self.other_store()
        role = other.get_role_by_name(ROLE_CUSTOMER)
        params = CreateUserParams(
            username="alice",
            hashed_password="hashed",
            full_name="Another Alice",
            email="alice2@example.com",
            role_id=role.internal_id,
        )
        with self.assertRaises(UniqueViolationError):
            other.create_user(params)
        # Session is usable after the rollback.
        self.assertEqual(other.get_user("alice").full_name, "Alice Example")

    def test_update_only_provided_fields(self) -> None:
        self.create_user()
        updated = self.store.update_user(
            UpdateUserParams(username="alice", full_name="Alice Renamed")
        )
        self.assertEqual(updated.full_name, "Alice Renamed")
        self.assertEqual(updated.email, "alice@example.com")
        self.assertEqual(updated.hashed_password, "hashed")

    def test_update_password(self) -> None:
        self.create_user()
        changed_at = T0 + timedelta(days=1)
        updated = self.store.update_user(
            UpdateUserParams(
                username="alice", hashed_password="new-hash", password_changed_at=changed_at
            )
        )
        self.assertEqual(updated.hashed_password, "new-hash")
        self.assertEqual(updated.password_changed_at, changed_at)

    def test_update_missing_user(self) -> None:
        with self.assertRaises(NoRowError):
            self.store.update_user(UpdateUserParams(username="ghost", full_name="x"))

    def test_soft_delete(self) -> None:
        self.create_user()
        deleted = self.store.delete_user("alice", T0)
        self.assertTrue(deleted.is_deleted)
        self.assertEqual(deleted.deleted_at, T0)
        self.assertTrue(self.store.get_user("alice").is_deleted)

    def test_list_users_by_role_skips_deleted(self) -> None:
        self.create_user("alice")
        self.create_user("bob")
        self.create_user("carol", role_name=ROLE_ADMIN)
        self.store.delete_user("bob", T0)
        customers = self.store.list_users_by_role(ROLE_CUSTOMER, limit=10, offset=0)
        self.assertEqual([u.username for u in customers], ["alice"])
        admins = self.store.list_users_by_role(ROLE_ADMIN, limit=10, offset=0)
        self.assertEqual([u.username for u in admins], ["carol"])

    def test_list_users_pagination(self) -> None:
        for name in ("alice", "bob", "carol"):
            self.create_user(name)
        page = self.store.list_users_by_role(ROLE_CUSTOMER, limit=2, offset=1)
        self.assertEqual(len(page), 2)


class TestRoles(StoreTestCase):
    def test_get_role_by_name(self) -> None:
        role = self.store.get_role_by_name(ROLE_ADMIN)
        self.assertEqual(role.name, ROLE_ADMIN)
        self.assertEqual(role.external_id, "URE101")

    def test_missing_role(self) -> None:
        with self.assertRaises(NoRowError):
            self.store.get_role_by_name("visitor")
        with self.assertRaises(NoRowError):
            self.store.get_role("URE999")

    def test_create_role_generates_external_id(self) -> None:
        role = self.store.create_role("visitor", "Walk-in visitors")
        self.assertTrue(role.external_id.startswith("URE"))
        self.assertTrue(role.external_id.isalnum())
        self.assertEqual(self.store.get_role(role.external_id).name, "visitor")

    def test_duplicate_role_name(self) -> None:
        with self.assertRaises(UniqueViolationError):
            self.store.create_role(ROLE_ADMIN, "again")

    def test_update_role(self) -> None:
        role = self.store.create_role("visitor", "Walk-in visitors")
        later = T0 + timedelta(hours=1)
        updated = self.store.update_role(role.external_id, None, "Day visitors", later)
        self.assertEqual(updated.name, "visitor")
        self.assertEqual(updated.description, "Day visitors")
        self.assertEqual(updated.updated_at, later)

    def test_update_missing_role(self) -> None:
        with self.assertRaises(NoRowError):
            self.store.update_role("URE999", "x", None, T0)

    def test_delete_role(self) -> None:
        role = self.store.create_role("visitor", "")
        self.store.delete_role(role.external_id)
        with self.assertRaises(NoRowError):
            self.store.get_role(role.external_id)

    def test_list_roles(self) -> None:
        names = [r.name for r in self.store.list_roles(limit=10, offset=0)]
        self.assertCountEqual(names, ["admin", "customer", "root"])
        self.assertEqual(len(self.store.list_roles(limit=1, offset=0)), 1)


class TestSessions(StoreTestCase):
    def test_create_and_get_session(self) -> None:
        self.create_user()
        params = self.session_params()
        created = self.store.create_session(params)
        fetched = self.store.get_session(params.id)
        self.assertEqual(created.id, params.id)
        self.assertEqual(fetched.refresh_token, "refresh-token")
        self.assertEqual(fetched.expired_at, params.expired_at)
        self.assertFalse(fetched.is_blocked)
        self.assertIsNone(fetched.blocked_at)

    def test_duplicate_session_id(self) -> None:
        self.create_user()
        params = self.session_params()
        self.store.create_session(params)
        with self.assertRaises(UniqueViolationError):
            self.other_store().create_session(params)

    def test_missing_session(self) -> None:
        with self.assertRaises(NoRowError):
            self.store.get_session(uuid.uuid4())
        with self.assertRaises(NoRowError):
            self.store.block_session(uuid.uuid4(), T0)

    def test_block_session(self) -> None:
        self.create_user()
        params = self.session_params()
        self.store.create_session(params)
        blocked_at = T0 + timedelta(minutes=5)
        blocked = self.store.block_session(params.id, blocked_at)
        self.assertTrue(blocked.is_blocked)
        self.assertEqual(blocked.blocked_at, blocked_at)
        self.assertTrue(self.store.get_session(params.id).is_blocked)


class TestDriverErrors(unittest.TestCase):
    """Unexpected driver failures surface as StoreError, never as SQLAlchemy exceptions."""

    def test_operational_error_translated(self) -> None:
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection lost"))
        store = SQLStore(db)
        with self.assertRaises(StoreError):
            store.get_user("alice")
        db.rollback.assert_called_once()


if __name__ == "__main__":
    unittest.main()
