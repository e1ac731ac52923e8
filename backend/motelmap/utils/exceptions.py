"""Custom exceptions and error handling utilities."""
from fastapi import HTTPException, status
from typing import Optional
from motelmap.utils.logger import logger


class AppException(Exception):
    """Base exception for application errors."""
    pass


class NotFoundError(AppException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found" + (f": {identifier}" if identifier else ""))


class ValidationError(AppException):
    """Raised when validation fails."""
    pass


class AuthenticationError(AppException):
    """Raised when no caller identity is available where one is required."""
    pass


class AuthorizationError(AppException):
    """Raised when a resolved caller lacks ownership or the admin role."""
    pass


class QuotaExceededError(AppException):
    """Raised when a photo batch would exceed the plan quota."""

    def __init__(self, quota: int, existing: int, requested: int):
        self.quota = quota
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"Photo quota exceeded: {existing} existing + {requested} new > {quota} allowed"
        )


class StorageError(AppException):
    """Raised when the blob store rejects or fails a request."""
    pass


def not_found_error(resource: str, identifier: Optional[str] = None) -> HTTPException:
    """
    Create a standardized 404 error.

    Args:
        resource: Name of the resource (e.g., "Listing", "User")
        identifier: Optional identifier that was not found

    Returns:
        HTTPException with 404 status
    """
    message = f"{resource} not found"
    if identifier:
        message += f": {identifier}"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


def validation_error(message: str) -> HTTPException:
    """
    Create a standardized 400 validation error.

    Args:
        message: Validation error message

    Returns:
        HTTPException with 400 status
    """
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def authentication_error(message: str = "Log in required") -> HTTPException:
    """
    Create a standardized 401 authentication error.

    Args:
        message: Authentication error message

    Returns:
        HTTPException with 401 status
    """
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden_error(message: str = "Permission denied") -> HTTPException:
    """
    Create a standardized 403 forbidden error.

    Args:
        message: Forbidden error message

    Returns:
        HTTPException with 403 status
    """
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)


def quota_exceeded_error(message: str) -> HTTPException:
    """Create a 409 error for a rejected photo batch."""
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message)


def storage_error(message: str) -> HTTPException:
    """Create a 502 error for blob store failures."""
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)


def to_http_error(error: AppException) -> HTTPException:
    """
    Convert a domain exception to an HTTP exception.

    Args:
        error: The domain exception raised by a service

    Returns:
        HTTPException with the matching status code
    """
    if isinstance(error, AuthenticationError):
        return authentication_error(str(error) or "Log in required")
    if isinstance(error, AuthorizationError):
        return forbidden_error(str(error) or "Permission denied")
    if isinstance(error, NotFoundError):
        return not_found_error(error.resource, error.identifier)
    if isinstance(error, QuotaExceededError):
        return quota_exceeded_error(str(error))
    if isinstance(error, ValidationError):
        return validation_error(str(error))
    if isinstance(error, StorageError):
        return storage_error(str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(error),
    )


def handle_database_error(error: Exception, operation: str) -> HTTPException:
    """
    Convert database errors to HTTP exceptions.

    Args:
        error: The database error
        operation: Description of the operation that failed

    Returns:
        HTTPException with appropriate status code
    """
    error_message = str(error)

    if "duplicate" in error_message.lower() or "unique" in error_message.lower():
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Resource already exists: {operation}",
        )

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Database error during {operation}: {error_message}",
    )


def handle_service_error(error: Exception, operation: str) -> HTTPException:
    """
    Convert an error raised inside a route to an HTTP exception.

    Domain exceptions map to their status code; anything else is logged and
    treated as a database error.
    """
    if isinstance(error, AppException):
        return to_http_error(error)

    logger.error(f"Unexpected error during {operation}: {error}", exc_info=True)
    return handle_database_error(error, operation)
