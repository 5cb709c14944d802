"""User management: password hashing on write and session revocation on delete."""

import logging

from reeltrack.core.security import PasswordHasher
from reeltrack.models import User, UserRole
from reeltrack.services.session_store import SessionStore
from reeltrack.services.user_store import UserStore

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserStore, sessions: SessionStore, hasher: PasswordHasher) -> None:
        self._users = users
        self._sessions = sessions
        self._hasher = hasher

    def create_user(
        self,
        username: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Hash the password and insert the user. Raises ConflictError on duplicates."""
        return self._users.create(
            username=username,
            email=email,
            password_hash=self._hasher.hash(password),
            role=role,
        )

    def get_user(self, user_id: int) -> User | None:
        return self._users.find_by_id(user_id)

    def list_users(self) -> list[User]:
        return self._users.find_all()

    def update_user(
        self,
        user_id: int,
        *,
        username: str,
        email: str,
        role: UserRole,
        is_banned: bool,
        password: str | None = None,
    ) -> User | None:
        password_hash = self._hasher.hash(password) if password is not None else None
        return self._users.update(
            user_id,
            username=username,
            email=email,
            role=role,
            is_banned=is_banned,
            password_hash=password_hash,
        )

    def delete_user(self, user_id: int) -> bool:
        """
        Revoke all of the user's sessions, then delete the user.

        Revocation runs first so that no session outlives its owner even on a
        backend without ON DELETE CASCADE.
        """
        revoked = self._sessions.revoke_all_for_user(user_id)
        deleted = self._users.delete(user_id)
        if deleted:
            logger.info("User deleted", extra={"user_id": user_id, "sessions_revoked": revoked})
        return deleted

    def ban_user(self, user_id: int) -> bool:
        return self._users.ban(user_id)

    def unban_user(self, user_id: int) -> bool:
        return self._users.unban(user_id)
