"""
Todo Backend — User SQLAlchemy Model
======================================

What:  ORM model for the `users` table (the credential store's rows).
Who:   Read and written only by UserService; AuthService sees the returned
       objects but never serializes `password_hash`.

Table Design:
    - id: integer primary key, exposed to clients as `user_id`
    - email: unique, stored exactly as submitted (case-sensitive)
    - password_hash: argon2id encoded hash string (never leaves the backend)
    - created_at: UTC with timezone
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from todo_backend.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        Created on the first login with an unseen email; never updated or
        deleted.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        comment="Login identifier, unique and case-sensitive",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="argon2id encoded password hash",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
