"""
PackTrack Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every error the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. The exception handlers registered in main.py turn them into the
       JSON error envelope with the status code declared on the class.
Who:   Raised by services, the file store and auth dependencies.

Exception Hierarchy:
    PackTrackError (base)                → 500
    ├── ValidationError                  → 400 Bad Request
    │   ├── SizeExceededError            → 400 (upload larger than allowed)
    │   └── UnsupportedTypeError         → 400 (declared MIME type rejected)
    ├── InvalidCredentialsError          → 400 Bad Request
    ├── UnauthorizedError                → 401 Unauthorized
    ├── ForbiddenError                   → 403 Forbidden
    ├── NotFoundError                    → 404 Not Found
    ├── ConflictError                    → 409 Conflict
    ├── StorageError                     → 500 Internal Server Error
    └── DatabaseError                    → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class PackTrackError(Exception):
    """
    Base exception for all PackTrack application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, never returned to the client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PackTrackError):
    """
    Raised when client input fails validation.

    When:    Missing upload, schema violations detected in the service layer,
             rejected file size or type.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

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


class SizeExceededError(ValidationError):
    """Upload is larger than the configured limit."""

    def __init__(self, size: int, max_size: int):
        max_mb = max_size / (1024 * 1024)
        super().__init__(
            message=f"File size exceeds {max_mb:g}MB limit",
            field="file",
            context={"size": size, "max_size": max_size},
        )
        self.size = size
        self.max_size = max_size


class UnsupportedTypeError(ValidationError):
    """Upload's declared MIME type is not in the allowed list."""

    def __init__(self, mimetype: str, allowed: Optional[list] = None):
        super().__init__(
            message=f"File type {mimetype} is not allowed",
            field="file",
            context={"mimetype": mimetype, "allowed": list(allowed or [])},
        )
        self.mimetype = mimetype


class InvalidCredentialsError(PackTrackError):
    """
    Raised on failed login.

    The message is identical whether the email is unknown or the password
    is wrong, so a caller cannot probe which accounts exist.
    """

    status_code = 400
    error_code = "invalid_credentials"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid credentials", context=context)


class UnauthorizedError(PackTrackError):
    """Missing, malformed or expired session token. HTTP 401."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(PackTrackError):
    """Valid token, insufficient role or ownership. HTTP 403."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PackTrackError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so routes never deal with status codes.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(PackTrackError):
    """A unique field (user email) is already taken. HTTP 409."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(PackTrackError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, path outside the upload root.
    HTTP:    500 Internal Server Error (paths are logged, not returned)
    """

    status_code = 500
    error_code = "storage_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PackTrackError):
    """
    Raised when a database operation fails unexpectedly.

    The client always receives a generic message; SQL details stay in logs.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
