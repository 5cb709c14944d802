"""ORM model for issued sessions (one access+refresh token pair per row)."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, false, func
from sqlalchemy.orm import relationship

from reeltrack.models.base import Base


class Token(Base):
    """
    One issued session. Live for access iff not revoked and expires_at is in the
    future; live for refresh iff not revoked and refresh_expires_at is in the future.
    Revocation is sticky.
    """

    __tablename__ = "tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token = Column(String(1024), nullable=False, unique=True, index=True)
    refresh_token = Column(String(1024), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    refresh_expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    is_revoked = Column(Boolean, nullable=False, default=False, server_default=false())

    user = relationship("User", back_populates="tokens")
