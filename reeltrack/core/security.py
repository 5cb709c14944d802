"""Password hashing and JWT issuance/verification for session authentication."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from functools import cached_property
from typing import Any

import bcrypt
import jwt

from reeltrack.core.config import TokenConfig

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of input.
BCRYPT_MAX_BYTES = 72


def utcnow() -> datetime:
    return datetime.now(UTC)


class PasswordHasher:
    """Salted, cost-parameterized bcrypt hashing. Stateless; safe to share across requests."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash; False for malformed hashes."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    @cached_property
    def _dummy_hash(self) -> str:
        return self.hash(uuid.uuid4().hex)

    def verify_dummy(self, plain_password: str) -> None:
        """Spend the same work as a real verify; used when there is no stored hash to check."""
        self.verify(plain_password, self._dummy_hash)


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class IssuedToken:
    """A signed token and the absolute expiry embedded in it."""

    value: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of an access or refresh token."""

    user_id: int
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    email: str | None = None
    role: str | None = None


class TokenIssuer:
    """
    Mints and verifies HMAC-signed JWTs.

    The signing key comes from an immutable TokenConfig and never changes for the
    life of the issuer. A valid signature is necessary but not sufficient: callers
    must also check the session store for revocation.
    """

    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] = utcnow) -> None:
        self._config = config
        self._clock = clock

    @property
    def access_ttl_seconds(self) -> int:
        return int(self._config.access_ttl.total_seconds())

    def _encode(self, payload: dict[str, Any]) -> str:
        return jwt.encode(
            payload,
            self._config.secret.get_secret_value(),
            algorithm=self._config.algorithm,
        )

    def issue_access(self, user_id: int, email: str, role: str) -> IssuedToken:
        """Create an access token carrying user id, email and role."""
        now = self._clock()
        expire = now + self._config.access_ttl
        payload: dict[str, Any] = {
            "iss": self._config.issuer,
            "sub": str(user_id),
            "type": TokenType.ACCESS.value,
            "email": email,
            "role": role,
            "iat": now,
            "exp": expire,
            "jti": uuid.uuid4().hex,
        }
        return IssuedToken(value=self._encode(payload), expires_at=expire)

    def issue_refresh(self, user_id: int) -> IssuedToken:
        """Create a refresh token; it carries only the subject."""
        now = self._clock()
        expire = now + self._config.refresh_ttl
        payload: dict[str, Any] = {
            "iss": self._config.issuer,
            "sub": str(user_id),
            "type": TokenType.REFRESH.value,
            "iat": now,
            "exp": expire,
            "jti": uuid.uuid4().hex,
        }
        return IssuedToken(value=self._encode(payload), expires_at=expire)

    def verify(self, token: str, expected_type: TokenType | None = None) -> TokenClaims | None:
        """
        Check signature, issuer and expiry; return claims or None.

        Malformed, tampered, wrong-issuer, expired and wrong-type tokens all
        yield None. No exception escapes to the caller.
        """
        try:
            payload = jwt.decode(
                token,
                self._config.secret.get_secret_value(),
                algorithms=[self._config.algorithm],
                issuer=self._config.issuer,
                options={"require": ["exp", "iat", "iss", "sub"]},
            )
        except jwt.PyJWTError:
            return None

        try:
            token_type = TokenType(payload.get("type"))
            user_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        if expected_type is not None and token_type is not expected_type:
            return None

        return TokenClaims(
            user_id=user_id,
            token_type=token_type,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            email=payload.get("email"),
            role=payload.get("role"),
        )
