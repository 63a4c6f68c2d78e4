"""
Todo Backend — Todo SQLAlchemy Model
======================================

What:  ORM model for the `todos` table.
Who:   TodoService only; every query filters on user_id.

Index on (user_id, created_at DESC) serves the only read pattern:
"this user's todos, newest first".
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Boolean, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from todo_backend.database import Base


class Todo(Base):
    """
    A todo item owned by exactly one user.

    Lifecycle:
        Created through POST /todos; listed through GET /todos; never updated
        or deleted.
    """

    __tablename__ = "todos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="Owning user",
    )

    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Non-empty, trimmed title",
    )

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_todos_user_created_at", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Todo(id={self.id}, user_id={self.user_id}, "
            f"completed={self.completed})>"
        )
