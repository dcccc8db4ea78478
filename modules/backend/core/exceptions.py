"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every exception carries a stable machine-readable code; the HTTP status
is assigned in exception_handlers.EXCEPTION_STATUS_MAP.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a note, file or user cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when request fields are missing or malformed."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when a bearer token or login credential is rejected."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class AuthorizationError(ApplicationError):
    """Raised when the password supplied for an encrypted note does not match."""

    def __init__(self, message: str = "Invalid password") -> None:
        super().__init__(message, code="AUTHZ_INVALID_PASSWORD")


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class PayloadTooLargeError(ApplicationError):
    """Raised when an uploaded file exceeds the size ceiling."""

    def __init__(self, message: str = "File too large") -> None:
        super().__init__(message, code="FILE_TOO_LARGE")


class UnsupportedMediaError(ApplicationError):
    """Raised when an uploaded file type is not on the allow-list."""

    def __init__(self, message: str = "Unsupported file type") -> None:
        super().__init__(message, code="FILE_UNSUPPORTED_TYPE")


class StorageError(ApplicationError):
    """Raised when a database or disk operation fails."""

    def __init__(self, message: str = "Storage error") -> None:
        super().__init__(message, code="SYS_STORAGE_ERROR")
