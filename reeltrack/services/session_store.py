"""Session store: persistence, liveness lookups and revocation for issued token pairs."""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from reeltrack.core.database import translate_store_errors
from reeltrack.core.security import utcnow
from reeltrack.models import Token

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Token rows behind a SQLAlchemy session. Each method is its own unit of work.

    Uniqueness of token strings is left to the database constraints; nothing here
    checks before inserting.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self._db = db
        self._clock = clock

    def create(self, row: Token) -> int:
        """Insert one session row and return its generated id."""
        with translate_store_errors(self._db, "Session token collides with an existing session."):
            self._db.add(row)
            self._db.commit()
            return row.id

    def find_live_by_access_token(self, token: str) -> Token | None:
        with translate_store_errors(self._db):
            return self._db.execute(
                select(Token).where(
                    Token.token == token,
                    Token.is_revoked.is_(False),
                    Token.expires_at > self._clock(),
                )
            ).scalar_one_or_none()

    def find_live_by_refresh_token(self, refresh_token: str) -> Token | None:
        with translate_store_errors(self._db):
            return self._db.execute(
                select(Token).where(
                    Token.refresh_token == refresh_token,
                    Token.is_revoked.is_(False),
                    Token.refresh_expires_at > self._clock(),
                )
            ).scalar_one_or_none()

    def revoke(self, access_token: str) -> None:
        """Mark the session revoked. No-op if already revoked or unknown."""
        with translate_store_errors(self._db):
            self._db.execute(
                update(Token)
                .where(Token.token == access_token)
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            self._db.commit()

    def revoke_all_for_user(self, user_id: int) -> int:
        """Revoke every session owned by user_id; returns how many were still unrevoked."""
        with translate_store_errors(self._db):
            result = self._db.execute(
                update(Token)
                .where(Token.user_id == user_id, Token.is_revoked.is_(False))
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
            return result.rowcount or 0

    def consume(self, session_id: int) -> bool:
        """
        Atomically revoke a still-unrevoked row.

        Returns True only for the caller whose UPDATE flipped the flag; a
        concurrent caller racing on the same row gets False.
        """
        with translate_store_errors(self._db):
            result = self._db.execute(
                update(Token)
                .where(Token.id == session_id, Token.is_revoked.is_(False))
                .values(is_revoked=True)
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
            return (result.rowcount or 0) == 1

    def purge_expired(self) -> int:
        """Delete rows that are revoked or past their refresh expiry. Returns rows deleted."""
        with translate_store_errors(self._db):
            result = self._db.execute(
                delete(Token)
                .where(
                    or_(
                        Token.is_revoked.is_(True),
                        Token.refresh_expires_at <= self._clock(),
                    )
                )
                .execution_options(synchronize_session=False)
            )
            self._db.commit()
            return result.rowcount or 0
