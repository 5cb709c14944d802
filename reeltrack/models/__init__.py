"""SQLAlchemy ORM models."""

from reeltrack.models.base import Base
from reeltrack.models.token import Token
from reeltrack.models.user import User, UserRole

__all__ = ["Base", "Token", "User", "UserRole"]
