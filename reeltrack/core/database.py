"""Database engine, session management and store error translation."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session, sessionmaker

from reeltrack.core.config import settings
from reeltrack.core.errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite ignores ON DELETE CASCADE unless the pragma is set per connection."""

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: URL, *, echo: bool = False, connect_timeout: int = 10) -> Engine:
    """Create an engine for Postgres (production) or SQLite (local dev and tests)."""
    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(engine)
        return engine
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        connect_args={"connect_timeout": connect_timeout},
    )


engine = build_engine(
    settings.sqlalchemy_url,
    echo=settings.DEBUG,
    connect_timeout=settings.DATABASE_CONNECT_TIMEOUT_SEC,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


def _rollback_quietly(session: Session) -> None:
    try:
        session.rollback()
    except SQLAlchemyError:
        # Connection already gone; the original error is what the caller sees.
        logger.warning("Rollback failed after store error", exc_info=True)


@contextmanager
def translate_store_errors(
    session: Session,
    conflict_message: str = "Resource conflicts with an existing record.",
) -> Iterator[None]:
    """
    Map SQLAlchemy failures onto the store error kinds.

    IntegrityError -> ConflictError; connectivity failures -> StoreUnavailableError.
    The session is rolled back in both cases so it stays usable.
    """
    try:
        yield
    except IntegrityError as e:
        _rollback_quietly(session)
        raise ConflictError(conflict_message) from e
    except (OperationalError, InterfaceError, DisconnectionError) as e:
        _rollback_quietly(session)
        logger.error("Database unavailable", extra={"error_type": type(e).__name__})
        raise StoreUnavailableError("Database is unavailable.") from e
