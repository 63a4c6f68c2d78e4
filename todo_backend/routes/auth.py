"""
Todo Backend — Login Route Handler
====================================

What:  POST /login — login-or-register, returning a session token.
How:   Validates the JSON body, delegates to AuthService.login().

Error responses (handled by global exception handlers):
    HTTP 400: Body missing, unparseable, or with blank email/password
    HTTP 401: Existing account, wrong password
    HTTP 409: Provisioning race could not be resolved
    HTTP 500: Datastore or hashing failure
"""

import logging

from fastapi import APIRouter, Depends, Response

from todo_backend.dependencies import get_auth_service
from todo_backend.schemas.auth import LoginRequest, LoginResponse
from todo_backend.schemas.common import ErrorResponse
from todo_backend.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Malformed request body", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        409: {"description": "Concurrent registration conflict", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Log in, creating the account on first use",
    description=(
        "Authenticates the email/password pair. An email that has never been seen "
        "creates a new account with this password. Returns a session token valid "
        "for 24 hours to be sent in the Authorization header."
    ),
)
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    return await auth.login(email=body.email, password=body.password)


@router.options("/login", include_in_schema=False)
async def login_options() -> Response:
    return Response(status_code=200)
