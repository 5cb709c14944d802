"""
CLI entrypoint for the session purge job. Run from cron, e.g.:

  python -m reeltrack.purge

Or hourly: 0 * * * * cd /path/to/reeltrack && .venv/bin/python -m reeltrack.purge
"""

import logging
import sys

from reeltrack.core.config import get_settings
from reeltrack.core.database import SessionLocal
from reeltrack.services.session_purge import run_session_purge

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run the purge: delete revoked sessions and sessions past refresh expiry."""
    settings = get_settings()
    logger.info("Session purge job starting", extra={"app_env": settings.APP_ENV})
    db = SessionLocal()
    try:
        run_session_purge(db, settings)
        return 0
    except Exception as e:
        logger.exception("Session purge job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
