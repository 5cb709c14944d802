"""Shared builders for tests: in-memory database, fast hasher, fixed clocks."""

from datetime import datetime, timedelta

from pydantic import SecretStr
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reeltrack.core.config import TokenConfig
from reeltrack.core.database import enable_sqlite_foreign_keys
from reeltrack.core.security import PasswordHasher, TokenIssuer, utcnow
from reeltrack.models import Base, User, UserRole
from reeltrack.services.auth import AuthService
from reeltrack.services.session_store import SessionStore
from reeltrack.services.user_store import UserStore

TEST_TOKEN_CONFIG = TokenConfig(
    secret=SecretStr("test-only-signing-secret-0123456789abcdef"),
    issuer="ReelTrackTest",
)

# Lowest bcrypt cost; keeps the suite fast.
FAST_HASHER = PasswordHasher(rounds=4)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with the full schema; one shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


class FixedClock:
    """Callable clock pinned to a moment; advance() moves it forward."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def make_issuer(clock=utcnow) -> TokenIssuer:
    return TokenIssuer(TEST_TOKEN_CONFIG, clock=clock)


def make_auth_service(db: Session, issuer: TokenIssuer | None = None, session_clock=utcnow) -> AuthService:
    return AuthService(
        UserStore(db),
        SessionStore(db, clock=session_clock),
        FAST_HASHER,
        issuer or make_issuer(),
    )


def add_user(
    db: Session,
    email: str = "a@x.com",
    password: str = "pw123456",
    username: str | None = None,
    role: UserRole = UserRole.USER,
    is_banned: bool = False,
) -> User:
    return UserStore(db).create(
        username=username or email.split("@")[0],
        email=email,
        password_hash=FAST_HASHER.hash(password),
        role=role,
        is_banned=is_banned,
    )
