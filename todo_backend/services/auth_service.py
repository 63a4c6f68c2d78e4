"""
Todo Backend — Auth Service (Auth Gateway)
============================================

What:  The request-facing side of authentication: login-or-register and
       session-token resolution for protected requests.
How:   Composes UserService, PasswordService and SessionService, all handed in
       at construction. Password hashing and verification run in Starlette's
       threadpool so argon2 never blocks the event loop.

Login Flow:
    ┌──────────────┐  found   ┌──────────────┐  match   ┌──────────────┐
    │ find_by_email│─────────▶│ verify pw    │─────────▶│ issue session│
    └──────┬───────┘          └──────┬───────┘          └──────────────┘
           │ not found               │ mismatch → 401         ▲
           ▼                         ▼                        │
    ┌──────────────┐  Conflict ┌──────────────┐               │
    │ hash + create│──────────▶│ re-read user │── verify ─────┘
    └──────┬───────┘           └──────────────┘
           └───────────────────────────────────────────────────┘

Auto-provisioning is the defined login contract: an unseen email creates the
account. When two first logins for one email race, the loser continues as an
ordinary login against the winner's record (its password must match).

Protected-request Flow:
    missing header        → 401 "Missing authorization header"
    unknown/expired token → 401 "Invalid or expired session"
    otherwise             → resolved user ID is the only identity used
"""

import logging
from datetime import timedelta
from typing import Optional

from pydantic import SecretStr
from starlette.concurrency import run_in_threadpool

from todo_backend.exceptions import ConflictError, UnauthorizedError
from todo_backend.models.user import User
from todo_backend.schemas.auth import LoginResponse
from todo_backend.services.password_service import PasswordService
from todo_backend.services.session_service import SessionService
from todo_backend.services.user_service import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
MISSING_CREDENTIAL = "Missing authorization header"
INVALID_SESSION = "Invalid or expired session"


class AuthService:
    """
    Auth gateway for one request.

    Args:
        users:       credential store
        sessions:    session manager
        passwords:   password verifier
        session_ttl: lifetime of sessions issued by login()
    """

    def __init__(
        self,
        users: UserService,
        sessions: SessionService,
        passwords: PasswordService,
        session_ttl: timedelta = timedelta(hours=24),
    ):
        self.users = users
        self.sessions = sessions
        self.passwords = passwords
        self.session_ttl = session_ttl

    async def login(self, email: str, password: SecretStr) -> LoginResponse:
        """
        Authenticates an existing account or provisions a new one, then
        issues a session.

        A failure after provisioning (e.g. the session insert) fails the
        login but leaves the new account in place.

        Raises:
            UnauthorizedError: Wrong password for an existing account (→ 401)
            ConflictError: Provisioning lost a race and the winner vanished (→ 409)
            DatabaseError / PasswordHashingError: Internal failures (→ 500)
        """
        user = await self.users.find_by_email(email)
        if user is None:
            user = await self._provision(email, password)
        else:
            await self._check_password(user, password)

        token = await self.sessions.issue(user.id, self.session_ttl)
        return LoginResponse(session_id=token, user_id=user.id, email=user.email)

    async def authenticate(self, authorization: Optional[str]) -> int:
        """
        Resolves an Authorization header value to a user ID.

        The header carries the raw token; a "Bearer " prefix is tolerated.

        Raises:
            UnauthorizedError: Header missing, or token unknown/expired (→ 401)
        """
        token = (authorization or "").strip()
        scheme, _, rest = token.partition(" ")
        if scheme.lower() == "bearer":
            token = rest.strip()
        if not token:
            raise UnauthorizedError(message=MISSING_CREDENTIAL)

        user_id = await self.sessions.resolve(token)
        if user_id is None:
            raise UnauthorizedError(message=INVALID_SESSION)
        return user_id

    async def _provision(self, email: str, password: SecretStr) -> User:
        password_hash = await run_in_threadpool(
            self.passwords.hash, password.get_secret_value()
        )
        try:
            return await self.users.create(email, password_hash)
        except ConflictError:
            existing = await self.users.find_by_email(email)
            if existing is None:
                raise
            logger.info("Concurrent first login detected; continuing as user %s", existing.id)
            await self._check_password(existing, password)
            return existing

    async def _check_password(self, user: User, password: SecretStr) -> None:
        matches = await run_in_threadpool(
            self.passwords.verify, password.get_secret_value(), user.password_hash
        )
        if not matches:
            logger.warning("Failed login for user %s", user.id)
            raise UnauthorizedError(message=INVALID_CREDENTIALS)
