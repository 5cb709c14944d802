"""ORM model for user accounts (credentials, role, ban status)."""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, false, func
from sqlalchemy.orm import relationship

from reeltrack.models.base import Base


class UserRole(str, enum.Enum):
    """Closed set of roles; stored by name."""

    USER = "USER"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"


class User(Base):
    """
    User account for session authentication and role-based access control.

    email is the login key; username and email are unique across all rows.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, length=50),
        nullable=False,
        default=UserRole.USER,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    is_banned = Column(Boolean, nullable=False, default=False, server_default=false())

    tokens = relationship(
        "Token",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
