from chatfiles.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    PayloadTooLargeError,
    AuthenticationError,
    AuthorizationError,
    UnsupportedOperationError,
    StoreError,
    UnsafeStorageKeyError,
    UnknownError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "PayloadTooLargeError",
    "AuthenticationError",
    "AuthorizationError",
    "UnsupportedOperationError",
    "StoreError",
    "UnsafeStorageKeyError",
    "UnknownError",
]
