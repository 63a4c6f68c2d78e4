"""
Todo Backend — Request Logging Middleware
===========================================

What:  One access-log line per API request.
How:   Times the downstream app, then logs method, path, status, duration,
       request ID and the authenticated user. `get_current_user_id` leaves the
       resolved user ID on request.state; requests that never authenticated
       (login, rejected sessions) log "-".

Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

Not logged at all: GET /health (load balancer checks) and OPTIONS (CORS preflights).
Never logged: request bodies (passwords) and the Authorization header
(session tokens).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("todo_backend.access")

_UNLOGGED_PATHS = {"/health"}


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS" or request.url.path in _UNLOGGED_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        user_id = getattr(request.state, "user_id", None)
        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s] user=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            getattr(request.state, "request_id", "-"),
            "-" if user_id is None else user_id,
        )
        return response
