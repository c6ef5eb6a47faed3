"""
Access control engine components.

This module provides:
- GrantStore: validated in-memory grants tree and ingestion of both input forms
- RoleGraph: role inheritance walks and cycle checks
- PermissionResolver / Permission: query resolution and its result
- AttributeFilter / filter_data: glob based field projection
- GrantBuilder / Access / Query: grant, deny and query declarations
"""

from .builder import Access, GrantBuilder, Query
from .enums import Action, Possession, parse_action_possession, permission_key
from .filtering import AttributeFilter, AttributeGlob, filter_data, parse_globs, sort_globs
from .hierarchy import RoleGraph
from .models import (
    EXTEND_KEY,
    RESERVED_KEYWORDS,
    AccessInfo,
    GrantRecord,
    QueryInfo,
    RoleEntry,
)
from .resolver import Permission, PermissionResolver, union_attributes
from .store import FlatForm, GrantStore, NestedForm, parse_grants_input

__all__ = [
    "Action",
    "Possession",
    "parse_action_possession",
    "permission_key",
    "EXTEND_KEY",
    "RESERVED_KEYWORDS",
    "RoleEntry",
    "QueryInfo",
    "AccessInfo",
    "GrantRecord",
    "GrantStore",
    "NestedForm",
    "FlatForm",
    "parse_grants_input",
    "RoleGraph",
    "Permission",
    "PermissionResolver",
    "union_attributes",
    "AttributeGlob",
    "AttributeFilter",
    "parse_globs",
    "sort_globs",
    "filter_data",
    "GrantBuilder",
    "Access",
    "Query",
]
