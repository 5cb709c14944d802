"""Core app configuration, database and security primitives."""

from reeltrack.core.config import get_settings, settings
from reeltrack.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
