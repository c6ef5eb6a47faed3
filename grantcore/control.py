"""
AccessControl facade.

This module wires the grants store, the role graph, the permission resolver
and the grant builder together behind one object that a host embeds.

Example:
    ```python
    from grantcore import AccessControl

    ac = AccessControl()
    ac.grant("user").create_own("video").read_any("video", ["*", "!id"])
    ac.grant("admin").extend("user").update_any("video").delete_any("video")

    permission = ac.can("user").read_any("video")
    permission.granted  # True
    permission.filter({"id": 1, "title": "x"})  # {"title": "x"}
    ```
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from grantcore.access.builder import Access, GrantBuilder, Names, Query
from grantcore.access.filtering import filter_data
from grantcore.access.models import QueryInfo
from grantcore.access.resolver import Permission, PermissionResolver
from grantcore.access.store import GrantStore
from grantcore.config import BaseAppSettings, get_settings
from grantcore.errors import AccessControlError
from grantcore.logging import ensure_logger


class AccessControl:
    """
    Role and attribute based access control over an in-memory grants tree.

    Args:
        grants: Optional nested mapping or flat list of grant records
        settings: Optional settings; loaded with get_settings() when omitted
        logger: Optional logger instance
    """

    def __init__(
        self,
        grants: Any = None,
        settings: Optional[BaseAppSettings] = None,
        logger: Optional[Any] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = ensure_logger(logger, __name__, self.settings)

        self._store = GrantStore(
            default_possession=self.settings.DEFAULT_POSSESSION, logger=self.logger
        )
        self._resolver = PermissionResolver(
            self._store,
            own_fallback_to_any=self.settings.OWN_FALLBACK_TO_ANY,
            default_possession=self.settings.DEFAULT_POSSESSION,
            logger=self.logger,
        )
        self._builder = GrantBuilder(
            self._store,
            default_possession=self.settings.DEFAULT_POSSESSION,
            logger=self.logger,
        )

        if grants is not None:
            self._store.load(grants)
            if self.settings.LOCK_ON_LOAD:
                self._store.lock()

    # -------------------------------
    #  Grants
    # -------------------------------

    @property
    def is_locked(self) -> bool:
        """Whether the grants are locked."""
        return self._store.is_locked

    def get_grants(self) -> Dict[str, Dict[str, Any]]:
        """
        Get the grants in nested form.

        Returns:
            A deep copy of the grants tree
        """
        return self._store.snapshot()

    def set_grants(self, grants: Any) -> "AccessControl":
        """
        Replace every grant.

        Args:
            grants: Nested mapping or flat list of grant records

        Returns:
            self, for chaining

        Raises:
            PermissionLockedError: If the grants are locked
            ValidationError: If the grants are malformed
            HierarchyError: If an extend list is self-referencing or cyclic
        """
        self._store.load(grants)
        return self

    def reset(self) -> "AccessControl":
        """Remove every grant."""
        self._store.reset()
        self.logger.info("Grants reset")
        return self

    def lock(self) -> "AccessControl":
        """Freeze the grants. There is no way to unlock them."""
        self._store.lock()
        return self

    # -------------------------------
    #  Roles and resources
    # -------------------------------

    def extend_role(self, roles: Names, extenders: Names) -> "AccessControl":
        """
        Make role(s) inherit every permission of extender role(s).

        Roles are created when missing; extenders must exist.

        Raises:
            PermissionLockedError: If the grants are locked
            ValidationError: If a name is invalid or an extender does not exist
            HierarchyError: If a role would extend itself or close a cycle
        """
        self._store.graph.extend(roles, extenders)
        self.logger.info("Extended %r with %r", roles, extenders)
        return self

    def remove_roles(self, roles: Names) -> "AccessControl":
        """
        Remove role(s) and drop them from every extend list.

        Raises:
            PermissionLockedError: If the grants are locked
            NotFoundError: If a role does not exist
        """
        self._builder.remove_roles(roles)
        return self

    def remove_resources(
        self, resources: Names, roles: Optional[Names] = None
    ) -> "AccessControl":
        """
        Remove resource(s) from the given roles, or from every role.

        Raises:
            PermissionLockedError: If the grants are locked
            ValidationError: If a name is invalid
        """
        self._builder.remove_resources(resources, roles)
        return self

    def remove_permission(
        self,
        resources: Names,
        action: str,
        possession: Optional[str] = None,
        roles: Optional[Names] = None,
    ) -> "AccessControl":
        """
        Remove a single "action:possession" entry from resource(s).

        Raises:
            PermissionLockedError: If the grants are locked
            ValidationError: If a name, action or possession is invalid
        """
        self._builder.remove_permission(resources, action, possession, roles)
        return self

    def get_roles(self) -> List[str]:
        return self._store.roles()

    def get_resources(self) -> List[str]:
        return self._store.resources()

    def has_role(self, role: Union[str, Sequence[str]]) -> bool:
        return self._store.has_role(role)

    def has_resource(self, resource: Union[str, Sequence[str]]) -> bool:
        return self._store.has_resource(resource)

    def get_inherited_roles_of(self, role: str) -> List[str]:
        """
        Get every role a role inherits from, directly or transitively.

        Raises:
            NotFoundError: If the role does not exist
        """
        return self._store.graph.inherited_roles_of(role)

    get_extended_roles_of = get_inherited_roles_of

    # -------------------------------
    #  Queries
    # -------------------------------

    def can(self, role_or_info: Optional[Union[Names, Mapping[str, Any]]] = None) -> Query:
        """
        Start a fluent permission query.

        Args:
            role_or_info: Role name(s) or a query mapping

        Returns:
            Query whose action terminals return a Permission
        """
        return Query(self._resolver, role_or_info)

    query = can

    def permission(self, query_info: Union[QueryInfo, Mapping[str, Any]]) -> Permission:
        """
        Resolve a fully specified query.

        Args:
            query_info: Mapping with role, resource, action and optional possession

        Returns:
            The resolved Permission

        Raises:
            InvalidQueryError: If the query is missing parts or has invalid values
        """
        return self._resolver.resolve(query_info)

    # -------------------------------
    #  Declarations
    # -------------------------------

    def grant(self, role_or_info: Optional[Union[Names, Mapping[str, Any]]] = None) -> Access:
        """
        Start a fluent grant declaration.

        Args:
            role_or_info: Role name(s), or a declaration mapping; a mapping with
                an action is committed right away

        Returns:
            Access builder
        """
        return Access(self._builder, role_or_info, denied=False)

    allow = grant

    def deny(self, role_or_info: Optional[Union[Names, Mapping[str, Any]]] = None) -> Access:
        """
        Start a fluent deny declaration.

        A committed deny stores an empty attribute list for the key,
        replacing any grant held there.
        """
        return Access(self._builder, role_or_info, denied=True)

    reject = deny

    # -------------------------------
    #  Utilities
    # -------------------------------

    @staticmethod
    def filter(data: Any, attributes: Optional[Union[str, Sequence[str]]]) -> Any:
        """Project data through attribute globs. See grantcore.access.filtering."""
        return filter_data(data, attributes)

    @staticmethod
    def is_access_control_error(obj: Any) -> bool:
        """Check whether an object is an error raised by this package."""
        return isinstance(obj, AccessControlError)

    def __repr__(self) -> str:
        return f"AccessControl(roles={len(self._store)}, locked={self.is_locked})"
