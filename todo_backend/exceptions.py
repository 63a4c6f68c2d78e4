"""
Todo Backend — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the auth and todo flows.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into JSON
       error responses with the matching HTTP status code.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    TodoAppError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized
    ├── ConflictError            → 409 Conflict
    ├── DatabaseError            → 500 Internal Server Error
    └── PasswordHashingError     → 500 Internal Server Error
        └── InvalidHashError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TodoAppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TodoAppError):
    """
    Raised when client input fails a business rule (e.g. blank todo title).

    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(TodoAppError):
    """
    Raised for missing, unknown or expired sessions and for bad credentials.

    The message never says which check failed beyond what the caller already
    knows (e.g. that it sent no header at all).

    HTTP: 401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(TodoAppError):
    """
    Raised when an insert violates a uniqueness constraint.

    Only reachable for users.email, when two first logins for the same
    address race each other.

    HTTP: 409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TodoAppError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; details such as the
    driver error type are kept in `context` and logged server-side only.

    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PasswordHashingError(TodoAppError):
    """
    Raised when the password hashing primitive fails.

    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Failed to process credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidHashError(PasswordHashingError):
    """
    Raised when a stored password hash cannot be parsed by the hash scheme.

    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Stored credential is malformed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
