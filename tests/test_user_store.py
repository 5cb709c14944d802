"""Tests for reeltrack.services.user_store against an in-memory database."""

import unittest

from sqlalchemy import func, select

from reeltrack.core.errors import ConflictError
from reeltrack.models import User, UserRole
from reeltrack.services.user_store import UserStore
from tests.support import FAST_HASHER, make_session_factory


class UserStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.store = UserStore(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def _create(self, username: str = "alice", email: str = "a@x.com", **kwargs: object) -> User:
        return self.store.create(username, email, FAST_HASHER.hash("pw123456"), **kwargs)


class TestCreateAndFind(UserStoreTestCase):
    def test_create_assigns_id_and_defaults(self) -> None:
        user = self._create()
        self.assertEqual(user.id, 1)
        self.assertEqual(user.role, UserRole.USER)
        self.assertFalse(user.is_banned)
        self.assertIsNotNone(user.created_at)
        self.assertIsNotNone(user.updated_at)

    def test_find_by_email_and_id(self) -> None:
        user = self._create()
        self.assertEqual(self.store.find_by_email("a@x.com").id, user.id)
        self.assertEqual(self.store.find_by_id(user.id).email, "a@x.com")
        self.assertIsNone(self.store.find_by_email("missing@x.com"))
        self.assertIsNone(self.store.find_by_id(42))

    def test_duplicate_email_conflicts_without_partial_row(self) -> None:
        self._create()
        with self.assertRaises(ConflictError):
            self._create(username="alice2", email="a@x.com")
        count = self.db.execute(select(func.count()).select_from(User)).scalar_one()
        self.assertEqual(count, 1)

    def test_duplicate_username_conflicts(self) -> None:
        self._create()
        with self.assertRaises(ConflictError):
            self._create(username="alice", email="other@x.com")

    def test_find_all_is_ordered_by_id(self) -> None:
        self._create("c", "c@x.com")
        self._create("a", "a@x.com", role=UserRole.ADMIN)
        self.assertEqual([u.username for u in self.store.find_all()], ["c", "a"])


class TestUpdate(UserStoreTestCase):
    def test_full_replace_keeps_password_when_omitted(self) -> None:
        user = self._create()
        old_hash = user.password_hash
        updated = self.store.update(
            user.id,
            username="alice-renamed",
            email="new@x.com",
            role=UserRole.MODERATOR,
            is_banned=True,
        )
        self.assertEqual(updated.username, "alice-renamed")
        self.assertEqual(updated.email, "new@x.com")
        self.assertEqual(updated.role, UserRole.MODERATOR)
        self.assertTrue(updated.is_banned)
        self.assertEqual(updated.password_hash, old_hash)

    def test_password_hash_replaced_when_given(self) -> None:
        user = self._create()
        new_hash = FAST_HASHER.hash("another-password")
        updated = self.store.update(
            user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            is_banned=False,
            password_hash=new_hash,
        )
        self.assertTrue(FAST_HASHER.verify("another-password", updated.password_hash))

    def test_update_into_existing_email_conflicts(self) -> None:
        self._create()
        bob = self._create("bob", "b@x.com")
        with self.assertRaises(ConflictError):
            self.store.update(bob.id, username="bob", email="a@x.com", role=UserRole.USER, is_banned=False)

    def test_update_missing_user_returns_none(self) -> None:
        self.assertIsNone(
            self.store.update(99, username="x", email="x@x.com", role=UserRole.USER, is_banned=False)
        )


class TestBanAndDelete(UserStoreTestCase):
    def test_ban_and_unban(self) -> None:
        user = self._create()
        self.assertTrue(self.store.ban(user.id))
        self.assertTrue(self.store.find_by_id(user.id).is_banned)
        self.assertTrue(self.store.unban(user.id))
        self.assertFalse(self.store.find_by_id(user.id).is_banned)

    def test_ban_missing_user(self) -> None:
        self.assertFalse(self.store.ban(5))
        self.assertFalse(self.store.unban(5))

    def test_delete(self) -> None:
        user = self._create()
        self.assertTrue(self.store.delete(user.id))
        self.assertIsNone(self.store.find_by_id(user.id))
        self.assertFalse(self.store.delete(user.id))


if __name__ == "__main__":
    unittest.main()
