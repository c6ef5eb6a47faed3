"""
Error handling module for grantcore.

All failures are raised synchronously as subclasses of AccessControlError.
They are programmer or input errors, never transient conditions, so nothing
in the package retries.

Limitations:
- Batch operations (extending or removing several roles) apply the pairs
  that succeed before the failing one; a raised error may leave the batch
  partially applied.
"""

from grantcore.errors.exceptions import (
    AccessControlError,
    HierarchyError,
    InvalidQueryError,
    NotFoundError,
    PermissionLockedError,
    ValidationError,
    fields_from_pydantic,
)

__all__ = [
    "AccessControlError",
    "ValidationError",
    "InvalidQueryError",
    "PermissionLockedError",
    "HierarchyError",
    "NotFoundError",
    "fields_from_pydantic",
]
