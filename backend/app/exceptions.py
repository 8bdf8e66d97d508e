"""
Todo Cards Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and route dependencies; caught by global handlers.

Exception Hierarchy:
    TodoCardsError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotAuthorizedError       → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── BusinessRuleError        → 422 Unprocessable Entity
    │   ├── AlreadyRegisteredError
    │   ├── InvalidLoginError
    │   └── CardAlreadyMarkedError
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class TodoCardsError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where handlers allow)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TodoCardsError):
    """
    Raised when client input fails a business validation rule.

    When:    Malformed timestamp layout, blank required values.
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


class AuthenticationError(TodoCardsError):
    """
    Raised when a request carries no session token, or one that is unknown
    or expired.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "A valid session token is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotAuthorizedError(TodoCardsError):
    """
    Raised when an authenticated user acts on behalf of another author.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TodoCardsError):
    """
    Raised when a requested resource does not exist.

    When:    Updating or deleting a card number the author does not own,
             a non-positive author id.
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
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class BusinessRuleError(TodoCardsError):
    """
    Base for requests that are well-formed but violate a business rule.

    HTTP:    422 Unprocessable Entity
    """


class AlreadyRegisteredError(BusinessRuleError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["email"] = email
        super().__init__(message=f"email {email} account already registered", context=ctx)


class InvalidLoginError(BusinessRuleError):
    """
    Raised when login credentials do not match.

    Unknown emails and wrong passwords produce the same message.
    """

    def __init__(
        self,
        message: str = "invalid login",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CardAlreadyMarkedError(BusinessRuleError):
    """Raised when updating a card whose `marked` timestamp is already set."""

    def __init__(self, activities_no: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["activities_no"] = activities_no
        super().__init__(
            message=f"Card number {activities_no} can't update data that's already marked",
            context=ctx,
        )


class DatabaseError(TodoCardsError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
