"""Tests for reeltrack.services.session_store against an in-memory database."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from reeltrack.core.errors import ConflictError, StoreUnavailableError
from reeltrack.core.security import utcnow
from reeltrack.models import Token
from reeltrack.services.session_store import SessionStore
from tests.support import FixedClock, add_user, make_session_factory


def _row(user_id: int, suffix: str, now=None, revoked: bool = False, access_ttl=timedelta(hours=1)) -> Token:
    now = now or utcnow()
    return Token(
        user_id=user_id,
        token=f"access-{suffix}",
        refresh_token=f"refresh-{suffix}",
        expires_at=now + access_ttl,
        refresh_expires_at=now + timedelta(days=30),
        is_revoked=revoked,
    )


class SessionStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.user = add_user(self.db)
        self.clock = FixedClock()
        self.store = SessionStore(self.db, clock=self.clock)

    def tearDown(self) -> None:
        self.db.close()


class TestCreate(SessionStoreTestCase):
    def test_returns_generated_id(self) -> None:
        first = self.store.create(_row(self.user.id, "a", self.clock.now))
        second = self.store.create(_row(self.user.id, "b", self.clock.now))
        self.assertIsInstance(first, int)
        self.assertNotEqual(first, second)

    def test_duplicate_access_token_conflicts(self) -> None:
        self.store.create(_row(self.user.id, "a", self.clock.now))
        dup = _row(self.user.id, "b", self.clock.now)
        dup.token = "access-a"
        with self.assertRaises(ConflictError):
            self.store.create(dup)
        # Session is usable again after the rollback.
        self.assertIsNotNone(self.store.find_live_by_access_token("access-a"))

    def test_duplicate_refresh_token_conflicts(self) -> None:
        self.store.create(_row(self.user.id, "a", self.clock.now))
        dup = _row(self.user.id, "b", self.clock.now)
        dup.refresh_token = "refresh-a"
        with self.assertRaises(ConflictError):
            self.store.create(dup)

    def test_unknown_owner_conflicts(self) -> None:
        with self.assertRaises(ConflictError):
            self.store.create(_row(9999, "orphan", self.clock.now))


class TestLiveLookups(SessionStoreTestCase):
    def test_finds_live_row_by_either_token(self) -> None:
        session_id = self.store.create(_row(self.user.id, "a", self.clock.now))
        self.assertEqual(self.store.find_live_by_access_token("access-a").id, session_id)
        self.assertEqual(self.store.find_live_by_refresh_token("refresh-a").id, session_id)

    def test_unknown_token_is_absent(self) -> None:
        self.assertIsNone(self.store.find_live_by_access_token("nope"))
        self.assertIsNone(self.store.find_live_by_refresh_token("nope"))

    def test_expired_access_is_absent_even_when_unrevoked(self) -> None:
        self.store.create(_row(self.user.id, "a", self.clock.now))
        self.clock.advance(timedelta(hours=2))
        self.assertIsNone(self.store.find_live_by_access_token("access-a"))
        # Refresh side still has 30 days.
        self.assertIsNotNone(self.store.find_live_by_refresh_token("refresh-a"))

    def test_expired_refresh_is_absent(self) -> None:
        self.store.create(_row(self.user.id, "a", self.clock.now))
        self.clock.advance(timedelta(days=31))
        self.assertIsNone(self.store.find_live_by_refresh_token("refresh-a"))

    def test_revoked_row_is_absent(self) -> None:
        self.store.create(_row(self.user.id, "a", self.clock.now, revoked=True))
        self.assertIsNone(self.store.find_live_by_access_token("access-a"))
        self.assertIsNone(self.store.find_live_by_refresh_token("refresh-a"))


class TestRevocation(SessionStoreTestCase):
    def test_revoke_is_idempotent(self) -> None:
        self.store.create(_row(self.user.id, "a", self.clock.now))
        self.store.revoke("access-a")
        self.store.revoke("access-a")
        self.assertIsNone(self.store.find_live_by_access_token("access-a"))
        self.assertIsNone(self.store.find_live_by_refresh_token("refresh-a"))

    def test_revoke_unknown_token_is_noop(self) -> None:
        self.store.revoke("never-issued")

    def test_revoke_all_for_user(self) -> None:
        other = add_user(self.db, email="b@x.com")
        for suffix in ("a", "b", "c"):
            self.store.create(_row(self.user.id, suffix, self.clock.now))
        self.store.create(_row(other.id, "d", self.clock.now))

        self.assertEqual(self.store.revoke_all_for_user(self.user.id), 3)
        self.assertEqual(self.store.revoke_all_for_user(self.user.id), 0)
        for suffix in ("a", "b", "c"):
            self.assertIsNone(self.store.find_live_by_access_token(f"access-{suffix}"))
        self.assertIsNotNone(self.store.find_live_by_access_token("access-d"))

    def test_consume_succeeds_once(self) -> None:
        session_id = self.store.create(_row(self.user.id, "a", self.clock.now))
        self.assertTrue(self.store.consume(session_id))
        self.assertFalse(self.store.consume(session_id))
        self.assertIsNone(self.store.find_live_by_refresh_token("refresh-a"))


class TestPurgeExpired(SessionStoreTestCase):
    def test_deletes_revoked_and_fully_expired_rows_only(self) -> None:
        self.store.create(_row(self.user.id, "live", self.clock.now))
        self.store.create(_row(self.user.id, "revoked", self.clock.now, revoked=True))
        old = _row(self.user.id, "old", self.clock.now - timedelta(days=40))
        self.store.create(old)
        # Access expired but refresh still live: must survive.
        self.store.create(_row(self.user.id, "stale-access", self.clock.now - timedelta(hours=3)))

        self.assertEqual(self.store.purge_expired(), 2)
        remaining = set(self.db.execute(select(Token.token)).scalars())
        self.assertEqual(remaining, {"access-live", "access-stale-access"})
        self.assertEqual(self.store.purge_expired(), 0)


class TestStoreUnavailable(unittest.TestCase):
    def test_connectivity_errors_are_translated(self) -> None:
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        store = SessionStore(db)
        with self.assertRaises(StoreUnavailableError):
            store.find_live_by_access_token("x")
        db.rollback.assert_called_once()


if __name__ == "__main__":
    unittest.main()
