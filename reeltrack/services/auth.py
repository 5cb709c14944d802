"""
Authentication protocol: login, token validation, rotating refresh and logout.

Expected business outcomes (bad credentials, banned user, dead token) are
returned as AuthFailure values so callers must handle them explicitly. Store
errors (ConflictError, StoreUnavailableError) are raised and never retried here.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from reeltrack.core.security import PasswordHasher, TokenIssuer, TokenType
from reeltrack.models import Token, User
from reeltrack.services.session_store import SessionStore
from reeltrack.services.user_store import UserStore

logger = logging.getLogger(__name__)


class AuthError(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    BANNED = "banned"
    INVALID_OR_EXPIRED_TOKEN = "invalid_or_expired_token"


@dataclass(frozen=True)
class AuthFailure:
    error: AuthError


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    session_id: int


@dataclass(frozen=True)
class LoginResult:
    user: User
    tokens: TokenPair


class AuthService:
    """Composes the user store, session store, hasher and token issuer."""

    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._hasher = hasher
        self._issuer = issuer

    def _mint_pair(self, user: User) -> TokenPair:
        access = self._issuer.issue_access(user.id, user.email, user.role.value)
        refresh = self._issuer.issue_refresh(user.id)
        session_id = self._sessions.create(
            Token(
                user_id=user.id,
                token=access.value,
                refresh_token=refresh.value,
                expires_at=access.expires_at,
                refresh_expires_at=refresh.expires_at,
                is_revoked=False,
            )
        )
        return TokenPair(
            access_token=access.value,
            refresh_token=refresh.value,
            expires_in=self._issuer.access_ttl_seconds,
            session_id=session_id,
        )

    def login(self, email: str, password: str) -> LoginResult | AuthFailure:
        """
        Authenticate by email and password and mint a new session.

        Unknown email and wrong password fail identically. A ban is reported only
        after the password checks out. Prior sessions are left alone.
        """
        user = self._users.find_by_email(email)
        if user is None:
            self._hasher.verify_dummy(password)
            logger.info("Login failed", extra={"reason": AuthError.INVALID_CREDENTIALS.value})
            return AuthFailure(AuthError.INVALID_CREDENTIALS)
        if not self._hasher.verify(password, user.password_hash):
            logger.info("Login failed", extra={"reason": AuthError.INVALID_CREDENTIALS.value})
            return AuthFailure(AuthError.INVALID_CREDENTIALS)
        if user.is_banned:
            logger.info(
                "Login refused for banned user",
                extra={"user_id": user.id, "reason": AuthError.BANNED.value},
            )
            return AuthFailure(AuthError.BANNED)

        tokens = self._mint_pair(user)
        logger.info("Login succeeded", extra={"user_id": user.id, "session_id": tokens.session_id})
        return LoginResult(user=user, tokens=tokens)

    def validate_token(self, access_token: str) -> User | AuthFailure:
        """
        Resolve a bearer access token to its user.

        Requires a live session row, a valid access-type signature whose subject
        matches the row, and an existing user who is not banned. Every miss gives
        the same INVALID_OR_EXPIRED_TOKEN failure.
        """
        invalid = AuthFailure(AuthError.INVALID_OR_EXPIRED_TOKEN)
        session = self._sessions.find_live_by_access_token(access_token)
        if session is None:
            return invalid
        claims = self._issuer.verify(access_token, TokenType.ACCESS)
        if claims is None or claims.user_id != session.user_id:
            return invalid
        user = self._users.find_by_id(session.user_id)
        if user is None or user.is_banned:
            return invalid
        return user

    def refresh_token(self, refresh_token: str) -> TokenPair | AuthFailure:
        """
        Rotate a session: spend the old row and mint a brand-new pair.

        The old row is consumed with a conditional update, so of two concurrent
        refreshes with the same token only one succeeds.
        """
        invalid = AuthFailure(AuthError.INVALID_OR_EXPIRED_TOKEN)
        session = self._sessions.find_live_by_refresh_token(refresh_token)
        if session is None:
            return invalid
        claims = self._issuer.verify(refresh_token, TokenType.REFRESH)
        if claims is None or claims.user_id != session.user_id:
            return invalid
        user = self._users.find_by_id(session.user_id)
        if user is None:
            return invalid
        if user.is_banned:
            logger.info(
                "Refresh refused for banned user",
                extra={"user_id": user.id, "reason": AuthError.BANNED.value},
            )
            return AuthFailure(AuthError.BANNED)

        old_session_id = session.id
        if not self._sessions.consume(old_session_id):
            logger.warning(
                "Refresh token already spent by a concurrent rotation",
                extra={"user_id": user.id, "session_id": old_session_id},
            )
            return invalid

        tokens = self._mint_pair(user)
        logger.info(
            "Session rotated",
            extra={
                "user_id": user.id,
                "old_session_id": old_session_id,
                "session_id": tokens.session_id,
            },
        )
        return tokens

    def logout(self, access_token: str) -> None:
        """Revoke the session for this access token; unknown tokens are ignored."""
        self._sessions.revoke(access_token)

    def logout_all_devices(self, user_id: int) -> int:
        """Revoke every session of user_id. Callers must have validated the user first."""
        revoked = self._sessions.revoke_all_for_user(user_id)
        logger.info("Logged out all devices", extra={"user_id": user_id, "revoked": revoked})
        return revoked
