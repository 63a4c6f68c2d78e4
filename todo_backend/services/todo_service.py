"""
Todo Backend — Todo Service (Todo Store)
==========================================

What:  Owner-scoped todo persistence.
How:   Every query is filtered on the user ID resolved from the request's
       session; there is no way to read or write another user's rows through
       this class.

Query plan (list):
    SELECT ... FROM todos WHERE user_id = :uid
    ORDER BY created_at DESC, id DESC
    → served by idx_todos_user_created_at
"""

import logging
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_backend.exceptions import DatabaseError, ValidationError
from todo_backend.models.todo import Todo

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 500


class TodoService:
    """Todo store backed by the `todos` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: int) -> List[Todo]:
        """
        All todos owned by user_id, newest first.

        Ties on created_at are broken by id so repeated reads return the
        same order.

        Raises:
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            result = await self.db.execute(
                select(Todo)
                .where(Todo.user_id == user_id)
                .order_by(desc(Todo.created_at), desc(Todo.id))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing todos for user %s: %s", user_id, type(e).__name__)
            raise DatabaseError(
                message="Could not retrieve todos. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def create(self, user_id: int, title: str) -> Todo:
        """
        Inserts and commits a new, uncompleted todo.

        Raises:
            ValidationError: Title is blank or too long (→ 400)
            DatabaseError: Insert failed (→ 500)
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError(message="Title is required", field="title")
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(
                message=f"Title must be at most {MAX_TITLE_LENGTH} characters",
                field="title",
            )

        todo = Todo(user_id=user_id, title=title, completed=False)
        self.db.add(todo)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Database error creating todo for user %s: %s", user_id, type(e).__name__)
            raise DatabaseError(
                message="Could not create the todo. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Created todo %s for user %s", todo.id, user_id)
        return todo
