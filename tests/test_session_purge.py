"""Unit and integration tests for the session purge job."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy import func, select

from reeltrack import purge
from reeltrack.core.security import utcnow
from reeltrack.models import Token
from reeltrack.services.session_purge import run_session_purge
from tests.support import add_user, make_session_factory


class TestPurgeDisabled(unittest.TestCase):
    """When SESSION_PURGE_ENABLED is False, run_session_purge does nothing."""

    def test_returns_zero_and_does_not_query(self) -> None:
        settings = MagicMock()
        settings.SESSION_PURGE_ENABLED = False
        db = MagicMock()
        self.assertEqual(run_session_purge(db, settings), 0)
        db.execute.assert_not_called()
        db.commit.assert_not_called()


class TestPurgeDeletesDeadSessions(unittest.TestCase):
    def test_deletes_revoked_and_expired_rows(self) -> None:
        settings = MagicMock()
        settings.SESSION_PURGE_ENABLED = True
        db = make_session_factory()()
        try:
            user = add_user(db)
            now = utcnow()
            db.add_all(
                [
                    Token(
                        user_id=user.id,
                        token="live",
                        refresh_token="live-r",
                        expires_at=now + timedelta(hours=1),
                        refresh_expires_at=now + timedelta(days=30),
                    ),
                    Token(
                        user_id=user.id,
                        token="revoked",
                        refresh_token="revoked-r",
                        expires_at=now + timedelta(hours=1),
                        refresh_expires_at=now + timedelta(days=30),
                        is_revoked=True,
                    ),
                    Token(
                        user_id=user.id,
                        token="expired",
                        refresh_token="expired-r",
                        expires_at=now - timedelta(days=2),
                        refresh_expires_at=now - timedelta(days=1),
                    ),
                ]
            )
            db.commit()

            self.assertEqual(run_session_purge(db, settings), 2)
            self.assertEqual(db.execute(select(func.count()).select_from(Token)).scalar_one(), 1)
            self.assertEqual(run_session_purge(db, settings), 0)
        finally:
            db.close()


class TestPurgeCli(unittest.TestCase):
    def test_exit_code_reflects_failure(self) -> None:
        db = MagicMock()
        with patch.object(purge, "SessionLocal", return_value=db), patch.object(
            purge, "run_session_purge", side_effect=RuntimeError("boom")
        ):
            self.assertEqual(purge.main(), 1)
        db.close.assert_called_once()

    def test_exit_code_on_success(self) -> None:
        db = MagicMock()
        with patch.object(purge, "SessionLocal", return_value=db), patch.object(
            purge, "run_session_purge", return_value=3
        ):
            self.assertEqual(purge.main(), 0)
        db.close.assert_called_once()

    def test_deleted_count_is_logged_once_per_run(self) -> None:
        with patch.object(purge, "SessionLocal", make_session_factory()):
            with self.assertLogs("reeltrack", level="INFO") as logs:
                self.assertEqual(purge.main(), 0)
        counted = [line for line in logs.output if "sessions_deleted=" in line]
        self.assertEqual(len(counted), 1)


if __name__ == "__main__":
    unittest.main()
