"""
StackIt Backend — Custom Exception Hierarchy
==============================================

What:  The errors services raise instead of touching HTTP.
How:   Each carries a user-facing message plus a context dict; the handler
       table in main.py turns the class into a status code and JSON body.
Who:   Raised by services, dependencies and middleware; caught by global handlers.

Exception Hierarchy:
    StackItError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized ("Login required")
    ├── PermissionDeniedError    → 403 Forbidden (not the owner)
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

Clients show `message` verbatim in a transient notification, so every message
here is written for end users.
"""

from typing import Any, Dict, Optional


class StackItError(Exception):
    """
    Base exception for all StackIt application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and returned only where the
                  handler explicitly includes it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StackItError):
    """
    Raised when client input fails a business rule.

    When:    Blank title/description/answer, too many tags, bad sort option,
             username already taken.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Title required",
            "details": {"field": "title"}
        }
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


class AuthenticationError(StackItError):
    """
    Raised when an operation needs a signed-in user and there is none,
    or when the presented bearer token cannot be verified.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Login required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(StackItError):
    """
    Raised when a signed-in user acts on a row they do not own.

    When:    Accepting an answer on someone else's question, deleting
             someone else's question or answer.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StackItError):
    """
    A question, answer or profile id that matches no row (→ 404).

    The message is what the detail page shows, e.g. "Question not found";
    the id travels in the context for the logs.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        details = dict(context or {}, resource=resource)
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=f"{resource.capitalize()} not found", context=details)
        self.resource = resource


class DatabaseError(StackItError):
    """
    Wraps an unexpected store failure. Services pick a generic, retryable
    message; the driver error itself only reaches the logs.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(StackItError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"Too many requests. Try again in {retry_after} seconds.",
            context=dict(context or {}, retry_after=retry_after),
        )
        self.retry_after = retry_after
