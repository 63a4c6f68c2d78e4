"""
Todo Backend — Session SQLAlchemy Model
=========================================

What:  ORM model for the `sessions` table: one row per issued login token.
Who:   SessionService only.

Table Design:
    - id: the opaque token itself (hex string), primary key
    - user_id: weak reference to users.id; a session never owns its user
    - expires_at: absolute UTC instant; the session is valid iff now < expires_at

    Expired rows are never updated. They stay until the optional sweep in
    todo_backend.maintenance removes them.
"""

from datetime import datetime

from sqlalchemy import TIMESTAMP, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from todo_backend.database import Base


class AuthSession(Base):
    """A login session (named to avoid clashing with SQLAlchemy's Session)."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="Opaque random session token",
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )

    expires_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        comment="Absolute expiry (UTC)",
    )

    __table_args__ = (
        Index("idx_sessions_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        # Never include the token itself.
        return f"<AuthSession(user_id={self.user_id}, expires_at='{self.expires_at}')>"
