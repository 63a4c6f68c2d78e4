"""
Todo Backend — Session Service (Session Manager)
==================================================

What:  Issues, stores and validates opaque session tokens with expiry.
How:   Tokens come from `secrets.token_hex` (at least 128 random bits) and are
       stored as the sessions primary key together with an absolute expiry.
       Expiry is lazy: nothing touches a row when it expires; resolve() just
       compares expires_at against the injected clock.

Session State Machine:
    Active (now < expires_at) ──▶ Expired (now ≥ expires_at)
    One-way; there is no revocation or renewal.

resolve() deliberately returns the same None for an unknown token and an
expired one, so callers cannot tell the two apart.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_backend.exceptions import DatabaseError
from todo_backend.models.session import AuthSession

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

MIN_TOKEN_BYTES = 16


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SessionService:
    """
    Session manager backed by the `sessions` table.

    Args:
        db:          per-request AsyncSession
        token_bytes: random bytes per token (hex-encoded, so 2x characters)
        clock:       returns the current aware UTC datetime
    """

    def __init__(
        self,
        db: AsyncSession,
        token_bytes: int = 32,
        clock: Clock = utc_now,
    ):
        if token_bytes < MIN_TOKEN_BYTES:
            raise ValueError(f"token_bytes must be at least {MIN_TOKEN_BYTES}")
        self.db = db
        self.token_bytes = token_bytes
        self.clock = clock

    async def issue(self, user_id: int, ttl: timedelta) -> str:
        """
        Creates and commits a session for user_id valid for ttl.

        Collisions are not retried; the token space makes them negligible.

        Raises:
            DatabaseError: The insert failed (→ 500)
        """
        token = secrets.token_hex(self.token_bytes)
        expires_at = self.clock() + ttl

        self.db.add(AuthSession(id=token, user_id=user_id, expires_at=expires_at))
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Database error issuing session: %s", type(e).__name__)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        logger.info("Issued session for user %s (expires %s)", user_id, expires_at.isoformat())
        return token

    async def resolve(self, token: str) -> Optional[int]:
        """
        Maps a token to its user ID.

        Returns:
            The owning user ID, or None if the token is unknown or expired.

        Raises:
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            result = await self.db.execute(
                select(AuthSession).where(AuthSession.id == token)
            )
            session = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error resolving session: %s", type(e).__name__)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        if session is None:
            return None
        if _as_utc(session.expires_at) <= self.clock():
            return None
        return session.user_id

    async def purge_expired(self) -> int:
        """
        Deletes every session whose expiry has passed.

        Maintenance only; nothing on the request path calls this.

        Returns:
            Number of rows removed.
        """
        try:
            result = await self.db.execute(
                delete(AuthSession)
                .where(AuthSession.expires_at <= self.clock())
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Database error purging sessions: %s", type(e).__name__)
            raise DatabaseError(context={"error_type": type(e).__name__}) from e

        return result.rowcount or 0
