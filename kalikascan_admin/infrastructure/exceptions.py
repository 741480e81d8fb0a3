"""
Custom exceptions used across the admin service.
"""
from fastapi import status
from typing import Any, Dict, Optional


class BaseServiceException(Exception):
    """Base exception for every service exception."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(BaseServiceException):
    """Raised when required configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="configuration_error",
            details=details
        )


class AuthenticationError(BaseServiceException):
    """Raised when a request carries no usable ID token."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(
        self,
        message: str = "Missing token",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="authentication_error",
            details=details
        )


class PermissionDeniedError(BaseServiceException):
    """Raised when the caller lacks the required custom claim."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str = "Forbidden (not admin)",
        required_claim: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        if required_claim:
            details["required_claim"] = required_claim
        super().__init__(
            message=message,
            error_code="permission_denied",
            details=details
        )


class ValidationError(BaseServiceException):
    """Raised when a request payload is invalid."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(
            message=message,
            error_code="validation_error",
            details=details
        )


class ResourceNotFoundError(BaseServiceException):
    """Raised when a document does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(
            message=message,
            error_code="resource_not_found",
            details=details
        )


class ConflictError(BaseServiceException):
    """Raised when a state transition is no longer allowed."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="conflict",
            details=details
        )


class ExternalServiceError(BaseServiceException):
    """Raised when Plant.id, Cloudinary or the geocoder fails."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(
        self,
        message: str,
        service_name: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["service"] = service_name
        super().__init__(
            message=message,
            error_code="external_service_error",
            details=details
        )


class OperationError(BaseServiceException):
    """Raised when an operation fails for an unexpected reason."""

    def __init__(
        self,
        message: str,
        operation: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["operation"] = operation
        super().__init__(
            message=message,
            error_code="operation_error",
            details=details
        )
