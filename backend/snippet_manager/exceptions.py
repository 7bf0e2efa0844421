"""
Snippet Manager Backend: Custom Exception Hierarchy
===================================================

What:  Application-specific exceptions, one per error kind.
How:   Each exception carries a client-safe `message` and a `context` dict.
       Global handlers (registered in main.py) turn them into JSON responses
       with the right status code. `context` is logged, and only returned to
       the client for validation errors.
Who:   Raised by stores, services and the auth gate.

Exception Hierarchy:
    SnippetManagerError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthError                → 401 Unauthorized
    │   └── InvalidCredentialsError
    ├── NotFoundError            → 404 Not Found
    ├── DuplicateError           → 409 Conflict
    └── StorageError             → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class SnippetManagerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned except for 400s)
    """

    error_code = "internal_server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnippetManagerError):
    """
    Raised when client input fails validation.

    When:    Malformed identifiers, empty required fields, references to
             users or folders that do not exist.
    HTTP:    400 Bad Request
    """

    error_code = "validation_error"
    status_code = 400

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


class AuthError(SnippetManagerError):
    """
    Raised when a request cannot be authenticated.

    When:    Missing/invalid/expired bearer token.
    HTTP:    401 Unauthorized, terminal for the request.
    """

    error_code = "unauthorized"
    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(AuthError):
    """
    Raised by login for an unknown username or a wrong password.

    Both cases share one message so the response does not reveal which
    usernames exist.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid username or password", context=context)


class NotFoundError(SnippetManagerError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /snippets/{id} with an unknown id, folder lookups
             for an unknown folder.
    HTTP:    404 Not Found
    """

    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DuplicateError(SnippetManagerError):
    """
    Raised when a unique field is already taken.

    When:    Registering with a username or email that already exists.
    HTTP:    409 Conflict
    """

    error_code = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str = "A record with the same unique value already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(SnippetManagerError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Connection lost mid-query, unclassified constraint violation,
             deadlock, etc.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The raw driver
        error travels in `context` and is logged server-side only.
    """

    error_code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
