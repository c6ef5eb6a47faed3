"""
Grants storage and ingestion.

The grants tree maps role names to their extend list and their resources;
each resource maps a canonical ``"action:possession"`` key to a list of
attribute globs. Two input shapes are accepted:

Nested form:
    ```python
    {
        "admin": {"$extend": ["user"], "video": {"create:any": ["*"]}},
        "user": {"video": {"read:own": ["title", "body"]}},
    }
    ```

Flat form:
    ```python
    [
        {"role": "admin", "resource": "video", "action": "create:any", "attributes": ["*"]},
        {"role": "user", "resource": "video", "action": "read", "possession": "own"},
    ]
    ```

Both are parsed into a tagged form at the boundary and normalized into the
same internal representation before anything else sees them.
"""

from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from grantcore.errors import (
    NotFoundError,
    PermissionLockedError,
    ValidationError,
    fields_from_pydantic,
)
from grantcore.logging import ensure_logger

from .enums import Possession, parse_action_possession, permission_key
from .hierarchy import RoleGraph
from .models import (
    EXTEND_KEY,
    GrantRecord,
    RoleEntry,
    normalize_attributes,
    validate_name,
)


class NestedForm(NamedTuple):
    """Grants given as role -> resource -> "action:possession" -> attributes."""

    grants: Mapping[str, Any]


class FlatForm(NamedTuple):
    """Grants given as a sequence of ``{role, resource, action, ...}`` records."""

    records: Sequence[Any]


GrantsInput = Union[NestedForm, FlatForm]


def parse_grants_input(grants: Any) -> GrantsInput:
    """
    Tag raw grants input with its shape.

    Args:
        grants: A mapping (nested form) or a list/tuple of records (flat form)

    Returns:
        NestedForm or FlatForm wrapping the input

    Raises:
        ValidationError: If the input is neither shape
    """
    if isinstance(grants, Mapping):
        return NestedForm(grants)
    if isinstance(grants, (list, tuple)):
        return FlatForm(grants)
    raise ValidationError(
        f"Invalid grants: expected a mapping or a list of records, got {type(grants).__name__}"
    )


def _ingest_nested(
    grants: Mapping[str, Any], default_possession: str, logger: Any
) -> Dict[str, RoleEntry]:
    entries: Dict[str, RoleEntry] = {}
    pending_extends: List[tuple] = []

    for raw_role, raw_entry in grants.items():
        role = _name(raw_role, "role")
        if raw_entry is None:
            raw_entry = {}
        if not isinstance(raw_entry, Mapping):
            raise ValidationError(
                f'Invalid grants for role "{role}": expected a mapping',
                fields=[{"field": role, "code": "VALIDATION_ERROR", "message": "expected a mapping"}],
            )

        entry = entries.setdefault(role, RoleEntry())
        for raw_resource, permissions in raw_entry.items():
            if raw_resource == EXTEND_KEY:
                if permissions:
                    pending_extends.append((role, permissions))
                continue

            resource = _name(raw_resource, "resource")
            if not isinstance(permissions, Mapping):
                raise ValidationError(
                    f'Invalid permissions for "{role}" on "{resource}": expected a mapping'
                )

            bucket = entry.resources.setdefault(resource, {})
            for raw_key, attributes in permissions.items():
                try:
                    action, possession = parse_action_possession(
                        raw_key, default_possession=default_possession
                    )
                    bucket[permission_key(action, possession)] = normalize_attributes(
                        attributes
                    )
                except ValueError as e:
                    raise ValidationError(
                        f'Invalid permission "{raw_key}" for "{role}" on "{resource}": {e}',
                        fields=[
                            {
                                "field": f"{role}.{resource}.{raw_key}",
                                "code": "VALIDATION_ERROR",
                                "message": str(e),
                            }
                        ],
                    )

    # Extend lists are checked once every role exists, so that a role may
    # extend one declared after it.
    graph = RoleGraph(entries, logger=logger)
    for role, extenders in pending_extends:
        graph.extend(role, extenders)

    return entries


def _ingest_flat(records: Sequence[Any], default_possession: str) -> Dict[str, RoleEntry]:
    entries: Dict[str, RoleEntry] = {}

    for index, raw in enumerate(records):
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Invalid grant record at index {index}: expected a mapping")
        try:
            record = GrantRecord.model_validate(
                dict(raw), context={"default_possession": default_possession}
            )
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid grant record at index {index}",
                fields=fields_from_pydantic(e.errors()),
            )

        entry = entries.setdefault(record.role, RoleEntry())
        bucket = entry.resources.setdefault(record.resource, {})
        # A later record for the same key replaces the earlier list.
        bucket[record.key] = list(record.attributes)

    return entries


def _name(value: Any, kind: str) -> str:
    try:
        return validate_name(value, kind)
    except ValueError as e:
        raise ValidationError(str(e))


class GrantStore:
    """
    Validated, in-memory grants tree.

    The store is the single owner of the grants; every other component reads
    or mutates it through the methods below. Locking is one-way: once
    locked, each mutator raises PermissionLockedError before doing any work.

    Example:
        ```python
        store = GrantStore({"user": {"video": {"read:own": ["title"]}}})
        store.lookup("user", "video", "read:own")  # ["title"]
        store.lock()
        ```
    """

    def __init__(
        self,
        grants: Any = None,
        default_possession: str = Possession.ANY.value,
        logger: Optional[Any] = None,
    ):
        """
        Initialize the grants store.

        Args:
            grants: Optional nested or flat grants input
            default_possession: Possession used when an input key omits it
            logger: Optional logger instance
        """
        self._entries: Dict[str, RoleEntry] = {}
        self._locked = False
        self.default_possession = default_possession
        self.logger = ensure_logger(logger, __name__)
        self.graph = RoleGraph(
            self._entries, guard=self.ensure_unlocked, logger=self.logger
        )

        if grants is not None:
            self.load(grants)

    # -------------------------------
    #  Lock
    # -------------------------------

    @property
    def is_locked(self) -> bool:
        """Whether the store has been locked."""
        return self._locked

    def lock(self) -> None:
        """
        Lock the store. There is no way to unlock it.
        """
        if not self._locked:
            self._locked = True
            self.logger.info("Grants locked (%d roles)", len(self._entries))

    def ensure_unlocked(self) -> None:
        """
        Raise if the store is locked.

        Raises:
            PermissionLockedError: If the store is locked
        """
        if self._locked:
            raise PermissionLockedError()

    # -------------------------------
    #  Loading
    # -------------------------------

    def load(self, grants: Any) -> None:
        """
        Replace the grants with validated input.

        The current grants are only replaced when the whole input is valid.

        Args:
            grants: Nested mapping or flat list of records

        Raises:
            PermissionLockedError: If the store is locked
            ValidationError: If the input is malformed
            HierarchyError: If an extend list references the role itself or a cycle
        """
        self.ensure_unlocked()

        parsed = parse_grants_input(grants)
        if isinstance(parsed, NestedForm):
            entries = _ingest_nested(
                parsed.grants, self.default_possession, self.logger
            )
        else:
            entries = _ingest_flat(parsed.records, self.default_possession)

        self._entries.clear()
        self._entries.update(entries)
        self.logger.info(
            "Loaded grants for %d roles from %s",
            len(entries),
            type(parsed).__name__,
        )

    def reset(self) -> None:
        """
        Remove every role.

        Raises:
            PermissionLockedError: If the store is locked
        """
        self.ensure_unlocked()
        self._entries.clear()

    # -------------------------------
    #  Reading
    # -------------------------------

    def roles(self) -> List[str]:
        """Get all role names, in insertion order."""
        return list(self._entries.keys())

    def resources(self) -> List[str]:
        """
        Get every resource name declared by any role.

        Returns:
            De-duplicated resource names in first-seen order
        """
        names: List[str] = []
        for entry in self._entries.values():
            for resource in entry.resources:
                if resource not in names:
                    names.append(resource)
        return names

    def has_role(self, role: Union[str, Sequence[str]]) -> bool:
        """
        Check whether a role, or all of several roles, exist.

        Args:
            role: A role name or a list of role names

        Returns:
            True if every given role exists
        """
        if isinstance(role, (list, tuple)):
            return len(role) > 0 and all(name in self._entries for name in role)
        return isinstance(role, str) and role in self._entries

    def has_resource(self, resource: Union[str, Sequence[str]]) -> bool:
        """
        Check whether a resource, or all of several resources, are declared.

        Args:
            resource: A resource name or a list of resource names

        Returns:
            True if every given resource is declared by some role
        """
        resources = self.resources()
        if isinstance(resource, (list, tuple)):
            return len(resource) > 0 and all(name in resources for name in resource)
        if not isinstance(resource, str) or resource == "":
            return False
        return resource in resources

    def role_entry(self, role: str) -> Optional[RoleEntry]:
        """Get the entry of a role, or None."""
        return self._entries.get(role)

    def lookup(self, role: str, resource: str, key: str) -> Optional[List[str]]:
        """
        Get the attribute list stored for a role, resource and key.

        Args:
            role: Role name
            resource: Resource name
            key: Canonical "action:possession" key

        Returns:
            A copy of the stored list, or None when nothing is stored
        """
        entry = self._entries.get(role)
        if entry is None:
            return None
        permissions = entry.resources.get(resource)
        if permissions is None or key not in permissions:
            return None
        return list(permissions[key])

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """
        Get the grants in nested form.

        Returns:
            A deep copy; changing it does not affect the store
        """
        return {role: entry.to_dict() for role, entry in self._entries.items()}

    def __contains__(self, role: object) -> bool:
        return role in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    # -------------------------------
    #  Mutation
    # -------------------------------

    def ensure_role(self, role: str) -> RoleEntry:
        """
        Get a role entry, creating an empty one when missing.

        Raises:
            PermissionLockedError: If the store is locked
        """
        self.ensure_unlocked()
        return self._entries.setdefault(role, RoleEntry())

    def set_permission(
        self, role: str, resource: str, key: str, attributes: List[str]
    ) -> None:
        """
        Store an attribute list, replacing any list already stored for the key.

        Args:
            role: Role name (created when missing)
            resource: Resource name (created when missing)
            key: Canonical "action:possession" key
            attributes: Attribute globs

        Raises:
            PermissionLockedError: If the store is locked
        """
        entry = self.ensure_role(role)
        bucket = entry.resources.setdefault(resource, {})
        bucket[key] = list(attributes)

    def delete_role(self, role: str) -> None:
        """
        Delete a role and drop it from every other role's extend list.

        Raises:
            PermissionLockedError: If the store is locked
            NotFoundError: If the role does not exist
        """
        self.ensure_unlocked()
        if role not in self._entries:
            raise NotFoundError(
                f'Cannot remove a non-existing role: "{role}"',
                details={"resource_type": "Role", "resource_id": role},
            )
        del self._entries[role]
        for entry in self._entries.values():
            if role in entry.extend:
                entry.extend.remove(role)

    def delete_resource(self, role: str, resource: str, key: Optional[str] = None) -> bool:
        """
        Delete a resource bucket, or a single key of it, from a role.

        Args:
            role: Role name
            resource: Resource name
            key: Optional "action:possession" key; the whole bucket when omitted

        Returns:
            True if something was deleted

        Raises:
            PermissionLockedError: If the store is locked
        """
        self.ensure_unlocked()
        entry = self._entries.get(role)
        if entry is None or resource not in entry.resources:
            return False
        if key is None:
            del entry.resources[resource]
            return True
        return entry.resources[resource].pop(key, None) is not None
