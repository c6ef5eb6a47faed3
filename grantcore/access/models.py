"""
Data models for grants, queries and grant declarations.

This module defines the value types passed between the engine components:

- RoleEntry: a role's extend list and its per-resource permission keys
- QueryInfo: a fully specified permission query
- AccessInfo: a grant or deny declaration waiting to be committed
- GrantRecord: one record of the flat grants input form

Query and declaration records are pydantic models so that raw dictionaries
coming from a host are validated and normalized at the boundary.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator, model_validator

from grantcore.errors import ValidationError

from .enums import Possession, parse_action_possession
from .filtering import AttributeGlob

EXTEND_KEY = "$extend"
RESERVED_KEYWORDS = ("*", "!", "$", EXTEND_KEY)

_LIST_SEPARATOR = re.compile(r"\s*[;,]\s*")


def is_valid_name(name: Any) -> bool:
    """
    Check whether a value can be used as a role or resource name.

    Args:
        name: Candidate name

    Returns:
        True for non-empty, non-reserved strings
    """
    return (
        isinstance(name, str)
        and name.strip() != ""
        and name.strip() not in RESERVED_KEYWORDS
    )


def validate_name(name: Any, kind: str = "name") -> str:
    """
    Validate and trim a role or resource name.

    Args:
        name: Candidate name
        kind: Label used in the error message ("role", "resource")

    Returns:
        The trimmed name

    Raises:
        ValueError: If the name is empty, not a string or reserved
    """
    if not isinstance(name, str) or name.strip() == "":
        raise ValueError(f"Invalid {kind} name: {name!r}")
    name = name.strip()
    if name in RESERVED_KEYWORDS:
        raise ValueError(f"Cannot use reserved name as {kind}: {name!r}")
    return name


def to_name_list(value: Any, kind: str = "name") -> List[str]:
    """
    Normalize one or many names into a validated, de-duplicated list.

    A single string may hold several names separated by commas or semicolons.

    Args:
        value: A name, a delimited string of names or a sequence of names
        kind: Label used in error messages

    Returns:
        List of trimmed names in first-seen order

    Raises:
        ValueError: If the value is empty or any name is invalid
    """
    if isinstance(value, str):
        items = _LIST_SEPARATOR.split(value.strip())
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValueError(f"Invalid {kind}(s): {value!r}")

    if not items:
        raise ValueError(f"Invalid {kind}(s): {value!r}")

    names: List[str] = []
    for item in items:
        name = validate_name(item, kind)
        if name not in names:
            names.append(name)
    return names


def normalize_attributes(value: Any) -> List[str]:
    """
    Normalize an attribute glob list.

    Args:
        value: A list of globs or a comma/semicolon delimited string

    Returns:
        Trimmed globs, de-duplicated in insertion order

    Raises:
        ValueError: If the value or one of its items is not a string, or an
            item is not a well-formed glob
    """
    if isinstance(value, str):
        items = _LIST_SEPARATOR.split(value.strip()) if value.strip() else []
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ValueError(f"Invalid attributes: {value!r}")

    attributes: List[str] = []
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"Invalid attribute: {item!r}")
        item = item.strip()
        if item:
            try:
                AttributeGlob(item)
            except ValidationError as e:
                raise ValueError(e.message)
        if item not in attributes:
            attributes.append(item)
    return attributes


@dataclass
class RoleEntry:
    """
    A role in the grants tree.

    Attributes:
        extend: Names of the roles this role inherits from, in insertion order
        resources: Resource name -> "action:possession" -> attribute globs
    """

    extend: List[str] = field(default_factory=list)
    resources: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Render the entry in the nested grants form (deep copy)."""
        data: Dict[str, Any] = {}
        if self.extend:
            data[EXTEND_KEY] = list(self.extend)
        for resource, permissions in self.resources.items():
            data[resource] = {key: list(attrs) for key, attrs in permissions.items()}
        return data


def _default_possession(info: ValidationInfo) -> str:
    context = info.context or {}
    return context.get("default_possession", Possession.ANY.value)


class QueryInfo(BaseModel):
    """
    A fully specified permission query.

    ``action`` may embed the possession (``"read:own"``); after validation
    ``action`` and ``possession`` always hold canonical values.

    Attributes:
        role: Queried role names, as given (not expanded)
        resource: Queried resource name
        action: Canonical action
        possession: Canonical possession
    """

    model_config = ConfigDict(extra="ignore")

    role: List[str]
    resource: str
    action: str
    possession: str

    @model_validator(mode="before")
    @classmethod
    def split_action_possession(cls, data: Any, info: ValidationInfo) -> Any:
        """Split a combined action token and apply the default possession."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("action") is None:
            raise ValueError("Query action is required")
        action, possession = parse_action_possession(
            data.get("action"),
            data.get("possession"),
            _default_possession(info),
        )
        data["action"] = action
        data["possession"] = possession
        return data

    @field_validator("role", mode="before")
    @classmethod
    def validate_roles(cls, value: Any) -> List[str]:
        """Accept a single role or a list of roles."""
        return to_name_list(value, "role")

    @field_validator("resource", mode="before")
    @classmethod
    def validate_resource(cls, value: Any) -> str:
        """Trim the resource name and reject empty or reserved names."""
        return validate_name(value, "resource")

    @property
    def key(self) -> str:
        """The ``"action:possession"`` key this query looks up."""
        return f"{self.action}:{self.possession}"


class AccessInfo(BaseModel):
    """
    A grant or deny declaration.

    Omitted attributes default to ``["*"]`` on a grant; a deny always
    carries an empty attribute list.

    Attributes:
        role: Role names receiving the declaration
        resource: Resource names the declaration applies to
        action: Canonical action
        possession: Canonical possession
        attributes: Attribute globs stored for the permission key
        denied: True for a deny declaration
    """

    model_config = ConfigDict(extra="ignore")

    role: List[str]
    resource: List[str]
    action: str
    possession: str
    attributes: List[str] = ["*"]
    denied: bool = False

    @model_validator(mode="before")
    @classmethod
    def prepare(cls, data: Any, info: ValidationInfo) -> Any:
        """Split the action token and settle the attribute defaults."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("action") is None:
            raise ValueError("Access action is required")
        action, possession = parse_action_possession(
            data.get("action"),
            data.get("possession"),
            _default_possession(info),
        )
        data["action"] = action
        data["possession"] = possession

        if data.get("denied"):
            data["attributes"] = []
        elif data.get("attributes") is None:
            data["attributes"] = ["*"]
        return data

    @field_validator("role", mode="before")
    @classmethod
    def validate_roles(cls, value: Any) -> List[str]:
        """Accept a single role or a list of roles."""
        return to_name_list(value, "role")

    @field_validator("resource", mode="before")
    @classmethod
    def validate_resources(cls, value: Any) -> List[str]:
        """Accept a single resource or a list of resources."""
        return to_name_list(value, "resource")

    @field_validator("attributes", mode="before")
    @classmethod
    def validate_attributes(cls, value: Any) -> List[str]:
        """Normalize attribute globs."""
        return normalize_attributes(value)

    @property
    def key(self) -> str:
        """The ``"action:possession"`` key this declaration writes."""
        return f"{self.action}:{self.possession}"


class GrantRecord(BaseModel):
    """
    One record of the flat grants input form.

    Attributes:
        role: Role name
        resource: Resource name
        action: Canonical action
        possession: Canonical possession (defaults to "any")
        attributes: Attribute globs (defaults to ``["*"]``)
    """

    model_config = ConfigDict(extra="ignore")

    role: str
    resource: str
    action: str
    possession: str
    attributes: List[str] = ["*"]

    @model_validator(mode="before")
    @classmethod
    def split_action_possession(cls, data: Any, info: ValidationInfo) -> Any:
        """Split a combined action token and apply the default possession."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        missing = [name for name in ("role", "resource", "action") if data.get(name) is None]
        if missing:
            raise ValueError(f"Grant record is missing: {', '.join(missing)}")
        action, possession = parse_action_possession(
            data["action"], data.get("possession"), _default_possession(info)
        )
        data["action"] = action
        data["possession"] = possession
        if data.get("attributes") is None:
            data["attributes"] = ["*"]
        return data

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, value: Any) -> str:
        return validate_name(value, "role")

    @field_validator("resource", mode="before")
    @classmethod
    def validate_resource(cls, value: Any) -> str:
        return validate_name(value, "resource")

    @field_validator("attributes", mode="before")
    @classmethod
    def validate_attributes(cls, value: Any) -> List[str]:
        return normalize_attributes(value)

    @property
    def key(self) -> str:
        return f"{self.action}:{self.possession}"
