"""
Todo Backend — FastAPI Dependencies
=====================================

What:  Builds the per-request service graph and the authentication gate.
How:   Long-lived collaborators (settings, password hasher) are read from
       `app.state`; per-request ones share the request's AsyncSession, which
       FastAPI caches so every service in one request uses the same session.

Usage:
    @router.get("/todos")
    async def list_todos(
        user_id: int = Depends(get_current_user_id),
        todos: TodoService = Depends(get_todo_service),
    ):
        ...
"""

from datetime import timedelta
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from todo_backend.config import Settings
from todo_backend.database import get_db_session
from todo_backend.services.auth_service import AuthService
from todo_backend.services.password_service import PasswordService
from todo_backend.services.session_service import SessionService
from todo_backend.services.todo_service import TodoService
from todo_backend.services.user_service import UserService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_service(request: Request) -> PasswordService:
    return request.app.state.password_service


def get_session_service(
    db: AsyncSession = Depends(get_db_session),
    config: Settings = Depends(get_settings),
) -> SessionService:
    return SessionService(db, token_bytes=config.session_token_bytes)


def get_auth_service(
    db: AsyncSession = Depends(get_db_session),
    sessions: SessionService = Depends(get_session_service),
    passwords: PasswordService = Depends(get_password_service),
    config: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(
        users=UserService(db),
        sessions=sessions,
        passwords=passwords,
        session_ttl=timedelta(hours=config.session_ttl_hours),
    )


def get_todo_service(db: AsyncSession = Depends(get_db_session)) -> TodoService:
    return TodoService(db)


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> int:
    """
    Authentication gate for protected routes.

    The resolved ID is also left on request.state for the access log.

    Returns:
        The user ID owning the presented session token.

    Raises:
        UnauthorizedError: Missing header or unknown/expired token (→ 401)
    """
    user_id = await auth.authenticate(authorization)
    request.state.user_id = user_id
    return user_id
