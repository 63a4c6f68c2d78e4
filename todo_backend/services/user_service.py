"""
Todo Backend — User Service (Credential Store)
================================================

What:  Persists and looks up user records.
How:   Receives an AsyncSession at construction (one instance per request).
       Writes are committed immediately, so a later failure in the same login
       (e.g. session issuance) does not undo an auto-provisioned account.

Uniqueness:
    users.email carries a UNIQUE constraint. When two first logins for the
    same address race, the loser's INSERT fails with IntegrityError, which is
    surfaced as ConflictError after rolling the transaction back.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_backend.exceptions import ConflictError, DatabaseError
from todo_backend.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Credential store backed by the `users` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        Exact-match lookup.

        Returns:
            The User, or None when no account uses this email.

        Raises:
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            result = await self.db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user: %s", type(e).__name__)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

    async def create(self, email: str, password_hash: str) -> User:
        """
        Inserts and commits a new user.

        Raises:
            ConflictError: The email is already registered (→ 409)
            DatabaseError: Any other datastore failure (→ 500)
        """
        user = User(email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("User creation conflicted on existing email")
            raise ConflictError(
                message="An account with this email already exists",
                context={"error_type": type(e).__name__},
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Database error creating user: %s", type(e).__name__)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        logger.info("Provisioned user %s", user.id)
        return user
