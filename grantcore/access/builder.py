"""
Grant and deny declarations.

GrantBuilder commits validated declarations into a GrantStore and owns role
and resource removal. Access and Query are small fluent value types on top
of it, e.g.:

    ```python
    ac.grant("user").read_own("video", ["title", "body"]).create_own("video")
    ac.deny("guest").delete_any("video")
    ac.can("user").read_own("video").granted
    ```
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from grantcore.errors import ValidationError, fields_from_pydantic
from grantcore.logging import ensure_logger

from .enums import Action, Possession, parse_action_possession, permission_key
from .models import AccessInfo, normalize_attributes, to_name_list
from .resolver import Permission, PermissionResolver
from .store import GrantStore

Names = Union[str, Sequence[str]]


def _names(value: Any, kind: str) -> List[str]:
    try:
        return to_name_list(value, kind)
    except ValueError as e:
        raise ValidationError(str(e))


class GrantBuilder:
    """
    Commit grant/deny declarations and remove roles or resources.

    Every method raises PermissionLockedError before doing any work when
    the store is locked.
    """

    def __init__(
        self,
        store: GrantStore,
        default_possession: str = Possession.ANY.value,
        logger: Optional[Any] = None,
    ):
        """
        Initialize the builder.

        Args:
            store: Grants store to write to
            default_possession: Possession used when a declaration omits it
            logger: Optional logger instance
        """
        self.store = store
        self.default_possession = default_possession
        self.logger = ensure_logger(logger, __name__)

    def build_info(self, data: Union[AccessInfo, Mapping[str, Any]]) -> AccessInfo:
        """
        Validate a declaration record.

        Args:
            data: AccessInfo or a mapping with role, resource, action and the optional
                possession, attributes and denied values

        Returns:
            Validated AccessInfo

        Raises:
            ValidationError: If any part of the declaration is invalid
        """
        if isinstance(data, AccessInfo):
            return data
        try:
            return AccessInfo.model_validate(
                dict(data), context={"default_possession": self.default_possession}
            )
        except PydanticValidationError as e:
            fields = fields_from_pydantic(e.errors())
            message = "; ".join(f"{f['field'] or 'access'}: {f['message']}" for f in fields)
            raise ValidationError(f"Invalid access declaration: {message}", fields=fields)

    def commit(
        self,
        role: Names,
        resource: Names,
        action: str,
        possession: Optional[str] = None,
        attributes: Optional[Union[str, Sequence[str]]] = None,
        denied: bool = False,
    ) -> AccessInfo:
        """
        Commit a grant or deny declaration.

        The attribute list stored at the exact role/resource/key is replaced,
        never merged. A deny always stores an empty list; a grant without
        attributes stores ``["*"]``.

        Args:
            role: Role name(s); missing roles are created
            resource: Resource name(s)
            action: Action, optionally with possession ("read:own")
            possession: Possession; defaults to the configured default
            attributes: Attribute globs
            denied: Commit a deny instead of a grant

        Returns:
            The committed AccessInfo

        Raises:
            PermissionLockedError: If the store is locked
            ValidationError: If a name, action, possession or attribute is invalid
        """
        return self.commit_info(
            {
                "role": role,
                "resource": resource,
                "action": action,
                "possession": possession,
                "attributes": attributes,
                "denied": denied,
            }
        )

    def commit_info(self, data: Union[AccessInfo, Mapping[str, Any]]) -> AccessInfo:
        """
        Commit a declaration record.

        Args:
            data: AccessInfo or mapping accepted by build_info

        Returns:
            The committed AccessInfo
        """
        self.store.ensure_unlocked()
        info = self.build_info(data)

        for role in info.role:
            for resource in info.resource:
                self.store.set_permission(role, resource, info.key, info.attributes)

        self.logger.info(
            "%s %s on %r for roles %r",
            "Denied" if info.denied else "Granted",
            info.key,
            info.resource,
            info.role,
        )
        return info

    def remove_resources(self, resources: Names, roles: Optional[Names] = None) -> None:
        """
        Delete resource buckets.

        Args:
            resources: Resource name(s) to delete
            roles: Role name(s) to delete them from; every role when omitted

        Raises:
            PermissionLockedError: If the store is locked
            ValidationError: If a name is invalid
        """
        self.store.ensure_unlocked()
        resource_names = _names(resources, "resource")
        role_names = self.store.roles() if roles is None else _names(roles, "role")

        for role in role_names:
            for resource in resource_names:
                self.store.delete_resource(role, resource)
        self.logger.info("Removed resources %r from roles %r", resource_names, role_names)

    def remove_permission(
        self,
        resources: Names,
        action: str,
        possession: Optional[str] = None,
        roles: Optional[Names] = None,
    ) -> None:
        """
        Delete a single "action:possession" key from resource buckets.

        Args:
            resources: Resource name(s)
            action: Action, optionally with possession ("update:own")
            possession: Possession; defaults to the configured default
            roles: Role name(s); every role when omitted

        Raises:
            PermissionLockedError: If the store is locked
            ValidationError: If a name, action or possession is invalid
        """
        self.store.ensure_unlocked()
        resource_names = _names(resources, "resource")
        role_names = self.store.roles() if roles is None else _names(roles, "role")
        try:
            key = permission_key(
                *parse_action_possession(action, possession, self.default_possession)
            )
        except ValueError as e:
            raise ValidationError(str(e))

        for role in role_names:
            for resource in resource_names:
                self.store.delete_resource(role, resource, key)

    def remove_roles(self, roles: Names) -> None:
        """
        Delete roles and drop them from every remaining extend list.

        Roles are removed one by one; if one does not exist, the ones before it
        stay removed.

        Args:
            roles: Role name(s) to delete

        Raises:
            PermissionLockedError: If the store is locked
            ValidationError: If a name is invalid
            NotFoundError: If a role does not exist
        """
        self.store.ensure_unlocked()
        for role in _names(roles, "role"):
            self.store.delete_role(role)
            self.logger.info("Removed role %r", role)


class Access:
    """
    Fluent grant/deny declaration.

    Role, resource and attributes are collected by the chain; each action
    terminal (``create_own``, ``read_any``, ...) commits one declaration and
    resets the attributes for the next terminal.
    """

    def __init__(
        self,
        builder: GrantBuilder,
        role_or_info: Optional[Union[Names, Mapping[str, Any]]] = None,
        denied: bool = False,
    ):
        """
        Start a declaration.

        Args:
            builder: GrantBuilder to commit through
            role_or_info: Role name(s), or a declaration mapping; a mapping that
                already names an action is committed right away
            denied: Build deny declarations
        """
        self._builder = builder
        self._info: Dict[str, Any] = {"denied": denied}

        if isinstance(role_or_info, (str, list, tuple)):
            self.role(role_or_info)
        elif isinstance(role_or_info, Mapping):
            if not role_or_info:
                raise ValidationError("Invalid access info: {}")
            self._info.update(role_or_info)
            self._info["denied"] = denied
            if all(self._info.get(k) is not None for k in ("role", "resource", "action")):
                try:
                    builder.commit_info(self._info)
                finally:
                    self._info.pop("attributes", None)
        elif role_or_info is not None:
            raise ValidationError(
                "Invalid role(s), expected a string, a list of strings or an access mapping"
            )

    @property
    def denied(self) -> bool:
        return bool(self._info.get("denied"))

    def role(self, value: Names) -> "Access":
        """Set the role(s); missing roles are created right away."""
        self._builder.store.ensure_unlocked()
        names = _names(value, "role")
        for name in names:
            self._builder.store.ensure_role(name)
        self._info["role"] = names
        return self

    def resource(self, value: Names) -> "Access":
        """Set the resource(s)."""
        self._info["resource"] = _names(value, "resource")
        return self

    def attributes(self, value: Union[str, Sequence[str]]) -> "Access":
        """Set the attribute globs for the next terminal."""
        try:
            self._info["attributes"] = normalize_attributes(value)
        except ValueError as e:
            raise ValidationError(str(e))
        return self

    def extend(self, roles: Names) -> "Access":
        """Make the current role(s) inherit from the given role(s)."""
        if not self._info.get("role"):
            raise ValidationError("Cannot extend before a role is set")
        self._builder.store.graph.extend(self._info["role"], roles)
        return self

    inherit = extend

    def grant(self, role_or_info: Optional[Union[Names, Mapping[str, Any]]] = None) -> "Access":
        """Start a new grant declaration on the same store."""
        return Access(self._builder, role_or_info, denied=False)

    def deny(self, role_or_info: Optional[Union[Names, Mapping[str, Any]]] = None) -> "Access":
        """Start a new deny declaration on the same store."""
        return Access(self._builder, role_or_info, denied=True)

    def lock(self) -> "Access":
        """Lock the underlying store."""
        self._builder.store.lock()
        return self

    def create_own(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.CREATE, Possession.OWN, resource, attributes)

    def create_any(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.CREATE, Possession.ANY, resource, attributes)

    def create(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self.create_any(resource, attributes)

    def read_own(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.READ, Possession.OWN, resource, attributes)

    def read_any(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.READ, Possession.ANY, resource, attributes)

    def read(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self.read_any(resource, attributes)

    def update_own(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.UPDATE, Possession.OWN, resource, attributes)

    def update_any(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.UPDATE, Possession.ANY, resource, attributes)

    def update(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self.update_any(resource, attributes)

    def delete_own(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.DELETE, Possession.OWN, resource, attributes)

    def delete_any(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self._commit(Action.DELETE, Possession.ANY, resource, attributes)

    def delete(self, resource: Optional[Names] = None, attributes=None) -> "Access":
        return self.delete_any(resource, attributes)

    def _commit(
        self,
        action: Action,
        possession: Possession,
        resource: Optional[Names],
        attributes: Optional[Union[str, Sequence[str]]],
    ) -> "Access":
        if resource is not None:
            self.resource(resource)
        if attributes is not None:
            self.attributes(attributes)

        self._info["action"] = action.value
        self._info["possession"] = possession.value
        try:
            self._builder.commit_info(self._info)
        finally:
            self._info.pop("attributes", None)
        return self


class Query:
    """
    Fluent permission query.

    Each action terminal resolves the query and returns a Permission.
    """

    def __init__(
        self,
        resolver: PermissionResolver,
        role_or_info: Optional[Union[Names, Mapping[str, Any]]] = None,
    ):
        """
        Start a query.

        Args:
            resolver: PermissionResolver to resolve with
            role_or_info: Role name(s), or a query mapping
        """
        self._resolver = resolver
        self._info: Dict[str, Any] = {}

        if isinstance(role_or_info, (str, list, tuple)):
            self.role(role_or_info)
        elif isinstance(role_or_info, Mapping):
            if not role_or_info:
                raise ValidationError("Invalid query info: {}")
            self._info.update(role_or_info)
        elif role_or_info is not None:
            raise ValidationError(
                "Invalid role(s), expected a string, a list of strings or a query mapping"
            )

    def role(self, value: Names) -> "Query":
        self._info["role"] = value
        return self

    def resource(self, value: str) -> "Query":
        self._info["resource"] = value
        return self

    def create_own(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.CREATE, Possession.OWN, resource)

    def create_any(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.CREATE, Possession.ANY, resource)

    def create(self, resource: Optional[str] = None) -> Permission:
        return self.create_any(resource)

    def read_own(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.READ, Possession.OWN, resource)

    def read_any(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.READ, Possession.ANY, resource)

    def read(self, resource: Optional[str] = None) -> Permission:
        return self.read_any(resource)

    def update_own(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.UPDATE, Possession.OWN, resource)

    def update_any(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.UPDATE, Possession.ANY, resource)

    def update(self, resource: Optional[str] = None) -> Permission:
        return self.update_any(resource)

    def delete_own(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.DELETE, Possession.OWN, resource)

    def delete_any(self, resource: Optional[str] = None) -> Permission:
        return self._resolve(Action.DELETE, Possession.ANY, resource)

    def delete(self, resource: Optional[str] = None) -> Permission:
        return self.delete_any(resource)

    def _resolve(
        self, action: Action, possession: Possession, resource: Optional[str]
    ) -> Permission:
        if resource is not None:
            self._info["resource"] = resource
        query = dict(self._info)
        query["action"] = action.value
        query["possession"] = possession.value
        return self._resolver.resolve(query)
