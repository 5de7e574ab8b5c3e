from fastapi import HTTPException
from typing import Any, Optional, Sequence
from app.schemas.result import ErrorCategory


class CustomException(HTTPException):
    """Base exception class for all custom application exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int,
        category: ErrorCategory,
        headers: Optional[dict] = None
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.category = category


class ResourceNotFoundException(CustomException):
    """Exception raised when a requested resource is not found"""

    def __init__(self, resource_name: str, resource_id: Optional[Any] = None):
        if resource_id:
            message = f"{resource_name} with ID '{resource_id}' was not found."
        else:
            message = f"{resource_name} was not found."

        super().__init__(
            message=message,
            status_code=404,
            category=ErrorCategory.NOT_FOUND
        )


class AuthenticationException(CustomException):
    """Raised when the caller identity or service key is missing or unknown"""

    def __init__(self, message: str = "Could not identify the caller."):
        super().__init__(
            message=message,
            status_code=401,
            category=ErrorCategory.AUTHENTICATION,
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationException(CustomException):
    """Raised when the caller does not belong to the room that owns a record"""

    def __init__(self, message: str = "You do not have access to this room."):
        super().__init__(
            message=message,
            status_code=403,
            category=ErrorCategory.AUTHORIZATION
        )


class DuplicateResourceException(CustomException):
    """Exception raised when attempting to create a resource that already exists"""

    def __init__(self, resource_name: str, identifier: Optional[str] = None):
        if identifier:
            message = f"{resource_name} with identifier '{identifier}' already exists."
        else:
            message = f"{resource_name} already exists."

        super().__init__(
            message=message,
            status_code=409,
            category=ErrorCategory.RESOURCE_CONFLICT
        )


class ValidationException(CustomException):
    """Exception raised for business logic validation failures"""

    def __init__(self, message: str, field: Optional[str] = None):
        if field:
            error_message = f"Validation failed for '{field}': {message}"
        else:
            error_message = f"Validation failed: {message}"

        super().__init__(
            message=error_message,
            status_code=422,
            category=ErrorCategory.VALIDATION
        )


class BadRequestException(CustomException):
    """Exception raised for malformed or invalid requests"""

    def __init__(self, message: str = "The request is invalid or malformed."):
        super().__init__(
            message=message,
            status_code=400,
            category=ErrorCategory.BAD_REQUEST
        )


class InternalServerException(CustomException):
    """Exception raised for internal server errors"""

    def __init__(self, message: str = "An internal server error occurred."):
        super().__init__(
            message=message,
            status_code=500,
            category=ErrorCategory.INTERNAL
        )


class MissingConfigurationException(CustomException):
    """Raised before a job starts when required environment variables are empty"""

    def __init__(self, names: Sequence[str]):
        super().__init__(
            message=f"Missing env vars: {', '.join(names)}",
            status_code=500,
            category=ErrorCategory.CONFIGURATION
        )
        self.names = list(names)
