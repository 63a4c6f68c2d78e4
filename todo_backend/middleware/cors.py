"""
Todo Backend — CORS Middleware
================================

What:  Starlette's CORSMiddleware with bodiless preflight answers.
How:   Starlette answers an accepted preflight with a "OK" text body; clients
       of this API expect a bare 200. The CORS headers Starlette computes are
       kept as they are. Rejected preflights (400) keep their explanation.

OPTIONS requests without the preflight headers are not preflights and fall
through to the routers, which answer them on /login and /todos.
"""

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response

# Recomputed for the empty body.
_BODY_HEADERS = {"content-length", "content-type"}


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose successful preflight response has no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers=request_headers)
        if response.status_code != 200:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in _BODY_HEADERS
        }
        return Response(status_code=200, headers=headers)
