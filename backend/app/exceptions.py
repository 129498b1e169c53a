"""
Library API — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for configuration, client input,
       missing resources, conflicts, and persistence failures.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) translate them into
       structured JSON error responses.
Who:   Raised by the resource-shaping toolkit, services, and routes.

Exception Hierarchy:
    LibraryApiError (base)
    ├── ConfigurationError       → 500, aborts startup when raised in lifespan
    ├── ValidationError          → 400 Bad Request (client can fix)
    │   └── FieldNotFoundError   → 400 Bad Request (unknown shaping field)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    └── DatabaseError            → 500 Internal Server Error

The request path validates sort and field input with boolean calls before
the raising forms run, so ValidationError and FieldNotFoundError only reach
the handlers when a caller skipped validation.
"""

from typing import Any, Dict, Optional


class LibraryApiError(Exception):
    """
    Base exception for all Library API errors.

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


class ConfigurationError(LibraryApiError):
    """
    Raised when the static mapping configuration is inconsistent.

    When:    A shape pair is registered twice, looked up without a
             registration, or registered after the registry was frozen.
    HTTP:    500 — this is a programming error, never a request error.
    """

    def __init__(
        self,
        message: str = "Invalid application configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(LibraryApiError):
    """
    Raised when client input fails validation.

    When:    Unknown sort key, unknown shaping field, non-positive page
             parameters, malformed identifier lists.
    HTTP:    400 Bad Request
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


class FieldNotFoundError(ValidationError):
    """
    Raised by the shaper when a requested field does not exist on a shape.

    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        field_name: str,
        shape: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Field '{field_name}' was not found"
        if shape:
            message = f"Field '{field_name}' was not found on {shape}"
        ctx = context or {}
        if shape:
            ctx["shape"] = shape
        super().__init__(message=message, field=field_name, context=ctx)
        self.field_name = field_name


class NotFoundError(LibraryApiError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/authors/{id} with an unknown UUID, book lookups under
             an author that does not own the book, etc.
    HTTP:    404 Not Found
    """

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


class ConflictError(LibraryApiError):
    """
    Raised when a create request targets a resource that already exists.

    When:    POST /api/authors/{id} for an existing author.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The {resource} already exists"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' already exists"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(LibraryApiError):
    """
    Raised when database operations fail unexpectedly.

    When:    A save or query fails (connection lost, constraint violation).
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the context
    (operation, identifiers, original exception type) is logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
