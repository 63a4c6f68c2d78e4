"""
Todo Backend — Request ID Middleware
======================================

What:  Correlation ID per request, echoed as X-Request-ID.
How:   A client-supplied ID is honoured only when it is a short token of
       [A-Za-z0-9._-] of at most 64 characters; anything else is replaced by a
       generated 12-hex-char ID.

The ID lives in `request_id_var` for log lines and error bodies, and in
`request.state.request_id` for middleware that runs after the handler.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._-]{1,%d}" % MAX_REQUEST_ID_LENGTH)

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(supplied: Optional[str]) -> str:
    """Returns the client's ID if acceptable, otherwise a fresh one."""
    if supplied and _REQUEST_ID_RE.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
