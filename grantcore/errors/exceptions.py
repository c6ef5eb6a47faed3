"""
Exception classes for the access control engine.

This module provides the exception hierarchy raised by grantcore. Every
error carries a machine readable code and an HTTP status so an embedding
host can turn it into a response without a lookup table of its own.
"""

from http import HTTPStatus
from typing import Any, Dict, List, Optional, Union


class AccessControlError(Exception):
    """
    Base exception for all access control errors.

    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        code: Error code identifier (default: ACCESS_CONTROL_ERROR)
        status_code: HTTP status code (default: 500)
        details: Additional error details
    """

    def __init__(
        self,
        message: str = "Access control error",
        code: str = "ACCESS_CONTROL_ERROR",
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error into a serializable dictionary.

        Returns:
            Dictionary with code, message, status_code and details
        """
        return {
            "code": self.code,
            "message": self.message,
            "status_code": int(self.status_code),
            "details": self.details,
        }


class ValidationError(AccessControlError):
    """
    Exception raised when names, records or grants fail validation.

    Attributes:
        fields: List of field-specific validation errors
    """

    def __init__(
        self,
        message: str = "Validation error",
        fields: Optional[List[Dict[str, Any]]] = None,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.fields = fields or []
        if fields:
            details = details or {}
            details["fields"] = fields

        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.BAD_REQUEST,
            details=details,
        )


class InvalidQueryError(ValidationError):
    """Exception raised when a permission query is missing or has invalid parts."""

    def __init__(
        self,
        message: str = "Invalid query",
        fields: Optional[List[Dict[str, Any]]] = None,
        code: str = "INVALID_QUERY",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, fields=fields, code=code, details=details)


class PermissionLockedError(AccessControlError):
    """Exception raised when grants are modified after being locked."""

    def __init__(
        self,
        message: str = "Cannot alter the underlying grants model. Grants are locked.",
        code: str = "GRANTS_LOCKED",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.CONFLICT,
            details=details,
        )


class HierarchyError(AccessControlError):
    """Exception raised when a role extension would extend a role by itself or form a cycle."""

    def __init__(
        self,
        message: str = "Invalid role hierarchy",
        role: Optional[str] = None,
        extender: Optional[str] = None,
        code: str = "ROLE_HIERARCHY_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        if role is not None or extender is not None:
            details = details or {}
            details.update({"role": role, "extender": extender})

        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.CONFLICT,
            details=details,
        )


class NotFoundError(AccessControlError):
    """Exception raised when a referenced role does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[Union[str, int]] = None,
        code: str = "NOT_FOUND",
        details: Optional[Dict[str, Any]] = None,
    ):
        if resource_type and resource_id:
            message = f"{resource_type} '{resource_id}' not found"
            details = details or {}
            details.update({"resource_type": resource_type, "resource_id": resource_id})

        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.NOT_FOUND,
            details=details,
        )


def fields_from_pydantic(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Create field error entries from pydantic validation error data.

    Args:
        errors: Output of ``pydantic.ValidationError.errors()``

    Returns:
        List of dictionaries with field, code and message keys
    """
    fields = []
    for error in errors:
        loc = error.get("loc", ())
        fields.append(
            {
                "field": ".".join(str(item) for item in loc),
                "code": "VALIDATION_ERROR",
                "message": error.get("msg", "Validation error"),
            }
        )
    return fields
