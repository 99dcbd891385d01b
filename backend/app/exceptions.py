"""
SentenceBoard Backend - Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for each failure category.
How:   Each exception carries a user-safe message and an optional context
       dict. Global handlers (registered in main.py) map them to HTTP
       responses; browser flows catch the auth/registration ones inline and
       redirect back to the form with the message.
Who:   Raised by services and identity dependencies.

Exception Hierarchy:
    SentenceBoardError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → redirect to /auth/login with message
    ├── RegistrationError        → redirect to /auth/register with message
    │   ├── ConflictError        → username / email already taken
    │   └── FieldTooLongError    → username / email longer than its column
    ├── UnauthenticatedError     → 401 Unauthorized (API routes)
    │   └── LoginRequiredError   → 303 redirect to /auth/login (browser routes)
    ├── ForbiddenError           → 403 Forbidden (ownership mismatch)
    ├── NotFoundError            → 404 Not Found
    ├── OAuthError               → redirect to /auth/login ("Google login failed.")
    └── DatabaseError            → 500 Internal Server Error
"""

import enum
from typing import Any, Dict, Optional


class SentenceBoardError(Exception):
    """
    Base exception for all SentenceBoard application errors.

    Attributes:
        message:  User-facing error description (safe to return in a response)
        context:  Additional debug info (logged, NOT returned to the client
                  unless the handler says otherwise)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SentenceBoardError):
    """
    Raised when client input fails validation.

    When:    Empty or oversized text, malformed sentence id.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Message cannot be empty",
            "details": {"field": "text", "reason": "empty_text"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        if reason:
            ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.field = field
        self.reason = reason


# ── Login / Registration ──────────────────────────────────────────────────

class AuthFailureReason(str, enum.Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    OAUTH_ONLY_ACCOUNT = "oauth_only_account"
    MISSING_CREDENTIALS = "missing_credentials"


_AUTH_MESSAGES = {
    # Same text for "no such user" and "wrong password": no user enumeration
    AuthFailureReason.INVALID_CREDENTIALS: "Incorrect username or password.",
    AuthFailureReason.OAUTH_ONLY_ACCOUNT: (
        "This account was created via OAuth (Google) and cannot be logged "
        "into with a password."
    ),
    AuthFailureReason.MISSING_CREDENTIALS: "Missing credentials.",
}


class AuthenticationError(SentenceBoardError):
    """Local login failed. `reason` tells tests and logs why; users see `message`."""

    def __init__(
        self,
        reason: AuthFailureReason = AuthFailureReason.INVALID_CREDENTIALS,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=_AUTH_MESSAGES[reason], context=context)
        self.reason = reason


class RegistrationFailureReason(str, enum.Enum):
    MISSING_FIELDS = "missing_fields"
    USERNAME_TAKEN = "username_taken"
    EMAIL_TAKEN = "email_taken"
    FIELD_TOO_LONG = "field_too_long"


class RegistrationError(SentenceBoardError):
    """Local registration was rejected."""

    def __init__(
        self,
        reason: RegistrationFailureReason = RegistrationFailureReason.MISSING_FIELDS,
        message: str = "All fields are required.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.reason = reason


class ConflictError(RegistrationError):
    """
    Username or email already belongs to another account.

    Raised both by the explicit pre-check and when the store's unique index
    rejects a concurrent duplicate insert.
    """

    @classmethod
    def username_taken(cls, username: str) -> "ConflictError":
        return cls(
            reason=RegistrationFailureReason.USERNAME_TAKEN,
            message=f'The username "{username}" is already taken.',
            context={"field": "username"},
        )

    @classmethod
    def email_taken(cls, email: str) -> "ConflictError":
        return cls(
            reason=RegistrationFailureReason.EMAIL_TAKEN,
            message=f'The email address "{email}" is already registered.',
            context={"field": "email"},
        )


class FieldTooLongError(RegistrationError):
    """A registration field does not fit its column."""

    def __init__(self, field: str, max_length: int):
        super().__init__(
            reason=RegistrationFailureReason.FIELD_TOO_LONG,
            message=f"The {field} cannot be longer than {max_length} characters.",
            context={"field": field, "max_length": max_length},
        )


# ── Request Authorization ─────────────────────────────────────────────────

class UnauthenticatedError(SentenceBoardError):
    """
    No valid session on a route that needs one.

    HTTP:    401 Unauthorized with a JSON body (API policy)
    """

    def __init__(
        self,
        message: str = "Unauthorized: You must be logged in to modify data.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LoginRequiredError(UnauthenticatedError):
    """
    No valid session on a browser page.

    HTTP:    303 redirect to the login form carrying the message (browser policy)
    """

    def __init__(
        self,
        message: str = "You must be logged in to view the dashboard.",
        next_path: Optional[str] = None,
    ):
        super().__init__(message=message, context={"next": next_path} if next_path else None)
        self.next_path = next_path


class ForbiddenError(SentenceBoardError):
    """
    The caller is authenticated but does not own the target resource.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SentenceBoardError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that to this
    exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class OAuthError(SentenceBoardError):
    """
    Federated login could not be completed.

    When:    State mismatch, provider returned an error, token exchange or
             profile fetch failed or timed out.
    """

    def __init__(
        self,
        message: str = "Google login failed.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SentenceBoardError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; details are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
