"""
grantcore: embedded role and attribute based access control.

Grants are declared per role, resource and "action:possession" key as lists
of attribute globs. Roles may extend other roles. Queries resolve to a
Permission that says whether access is granted and projects resource data
down to the permitted attributes.
"""

from grantcore.access import (
    Action,
    AttributeFilter,
    Permission,
    Possession,
    filter_data,
)
from grantcore.control import AccessControl
from grantcore.errors import (
    AccessControlError,
    HierarchyError,
    InvalidQueryError,
    NotFoundError,
    PermissionLockedError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "AccessControl",
    "Action",
    "Possession",
    "Permission",
    "AttributeFilter",
    "filter_data",
    "AccessControlError",
    "ValidationError",
    "InvalidQueryError",
    "PermissionLockedError",
    "HierarchyError",
    "NotFoundError",
]
