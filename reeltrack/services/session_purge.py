"""Session purge: delete revoked and fully expired token rows."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from reeltrack.services.session_store import SessionStore

if TYPE_CHECKING:
    from reeltrack.core.config import Settings

logger = logging.getLogger(__name__)


def run_session_purge(db: Session, settings: "Settings") -> int:
    """
    Delete sessions that can never be live again. Returns rows deleted.

    Idempotent and safe alongside live traffic: only revoked rows and rows past
    their refresh expiry are touched.
    """
    if not settings.SESSION_PURGE_ENABLED:
        logger.info("Session purge is disabled (SESSION_PURGE_ENABLED=false); skipping.")
        return 0

    deleted_count = SessionStore(db).purge_expired()
    logger.info("Session purge run: sessions_deleted=%s", deleted_count)
    return deleted_count
