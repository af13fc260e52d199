from typing import Any


class AppException(Exception):
    """Base application exception."""

    status_code: int = 400
    reason: str = "bad_request"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if reason is not None:
            self.reason = reason
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Client-fixable input error (bad filename, type or size)."""

    status_code = 400
    reason = "invalid_request"

    def __init__(self, message: str, reason: str | None = None, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, reason=reason, details=details)


class PayloadTooLargeError(ValidationError):
    """Upload exceeds the absolute size ceiling."""

    status_code = 413
    reason = "file_too_large"


class NotFoundError(AppException):
    """Resource not found."""

    status_code = 404
    reason = "not_found"

    def __init__(self, resource: str, identifier: Any = None, reason: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, reason=reason)


class AuthenticationError(AppException):
    """Missing or invalid credential."""

    status_code = 401
    reason = "authentication_required"

    def __init__(self, message: str = "Authentication required", reason: str | None = None):
        super().__init__(message=message, reason=reason)


class AuthorizationError(AppException):
    """Not authorized to perform action."""

    status_code = 403
    reason = "forbidden"

    def __init__(self, message: str = "Not authorized", reason: str | None = None):
        super().__init__(message=message, reason=reason)


class UnsupportedOperationError(AppException):
    """Operation is not available for this resource (e.g. inline preview)."""

    status_code = 415
    reason = "unsupported_operation"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message=message, reason=reason)


class StoreError(AppException):
    """Object store call failed. Not retried."""

    status_code = 500
    reason = "store_error"

    def __init__(self, message: str = "File storage is unavailable", reason: str | None = None):
        super().__init__(message=message, reason=reason)


class UnsafeStorageKeyError(StoreError):
    """Storage key outside the safe prefix; refused before any network call."""

    reason = "unsafe_storage_key"

    def __init__(self, key: object):
        self.key = key
        super().__init__(message="Refusing to touch storage key outside the safe prefix")


class UnknownError(AppException):
    """Fallback for anything unexpected."""

    status_code = 500
    reason = "unknown_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message=message)
