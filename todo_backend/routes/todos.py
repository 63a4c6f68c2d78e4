"""
Todo Backend — Todo Route Handlers
====================================

What:  GET /todos (list) and POST /todos (create) for the signed-in user.
How:   get_current_user_id resolves the Authorization token first; the
       resulting user ID is the only identity passed to TodoService.

Check order (POST):
    1. Session   → 401 on missing/unknown/expired token
    2. Body      → 400 on unparseable JSON or missing title
    3. Title     → 400 when blank after trimming

The body is read inside the handler, after the session dependency has run.
FastAPI decodes declared body parameters before dependencies, so TodoCreate
is not a handler parameter.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request, Response
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from todo_backend.dependencies import get_current_user_id, get_todo_service
from todo_backend.exceptions import ValidationError
from todo_backend.schemas.common import ErrorResponse
from todo_backend.schemas.todo import TodoCreate, TodoResponse
from todo_backend.services.todo_service import TodoService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Todos"])


async def _read_todo_body(request: Request) -> TodoCreate:
    """Decodes and validates the POST /todos body."""
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError(message="Invalid request body") from e

    try:
        return TodoCreate.model_validate(payload)
    except PydanticValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        ) from e


@router.get(
    "/todos",
    response_model=List[TodoResponse],
    responses={
        401: {"description": "Missing, invalid or expired session", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the current user's todos",
    description="Returns every todo owned by the session's user, newest first.",
)
async def list_todos(
    user_id: int = Depends(get_current_user_id),
    todos: TodoService = Depends(get_todo_service),
) -> List[TodoResponse]:
    items = await todos.list_for_user(user_id)
    return [TodoResponse.model_validate(item) for item in items]


@router.post(
    "/todos",
    response_model=TodoResponse,
    responses={
        400: {"description": "Unparseable body, missing or blank title", "model": ErrorResponse},
        401: {"description": "Missing, invalid or expired session", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a todo",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": TodoCreate.model_json_schema()}},
        },
    },
)
async def create_todo(
    request: Request,
    user_id: int = Depends(get_current_user_id),
    todos: TodoService = Depends(get_todo_service),
) -> TodoResponse:
    """Creates an uncompleted todo owned by the current user."""
    body = await _read_todo_body(request)
    todo = await todos.create(user_id, body.title)
    return TodoResponse.model_validate(todo)


@router.options("/todos", include_in_schema=False)
async def todos_options() -> Response:
    """Bare OPTIONS (no preflight headers) gets an empty 200."""
    return Response(status_code=200)
