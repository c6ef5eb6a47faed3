"""
Permission resolution.

A query names one or more roles, a resource, an action and a possession.
The resolver expands the roles through the role hierarchy, collects the
attribute lists stored for the query key on every role of that set and
unions them into one list. The query is granted when the list holds at least
one non-negated glob.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from grantcore.errors import InvalidQueryError, fields_from_pydantic
from grantcore.logging import ensure_logger

from .enums import Possession, permission_key
from .filtering import NEGATION, AttributeFilter, AttributeGlob
from .models import QueryInfo
from .store import GrantStore


def union_attributes(*attribute_lists: List[str]) -> List[str]:
    """
    Union attribute lists, dropping duplicates and keeping first-seen order.

    A negated glob of one list is dropped when another list keeps the path
    it negates, so a role never takes away what another role grants and the
    result does not depend on the order of the lists.

    Args:
        *attribute_lists: Lists of attribute globs, one per role

    Returns:
        A new list
    """
    filters = [AttributeFilter(attributes) for attributes in attribute_lists]

    union: List[str] = []
    for index, attributes in enumerate(attribute_lists):
        others = filters[:index] + filters[index + 1:]
        for attribute in attributes:
            if attribute in union:
                continue
            if attribute.strip().startswith(NEGATION):
                path = AttributeGlob(attribute).segments
                if any(other.keeps(path) for other in others):
                    continue
            union.append(attribute)
    return union


def is_granted(attributes: List[str]) -> bool:
    """
    Check whether an attribute list grants access.

    Negated globs only narrow a positive match, so a list made only of
    negations grants nothing.

    Args:
        attributes: Attribute globs

    Returns:
        True if at least one glob is not negated
    """
    return any(
        attribute.strip() != "" and not attribute.strip().startswith(NEGATION)
        for attribute in attributes
    )


class Permission:
    """
    Result of a permission query.

    Attributes:
        roles: Queried roles, as given (not expanded)
        resource: Queried resource
        action: Canonical action of the query
        possession: Canonical possession of the query
        attributes: Unioned attribute globs (possibly empty)
    """

    def __init__(
        self,
        roles: List[str],
        resource: str,
        attributes: List[str],
        action: Optional[str] = None,
        possession: Optional[str] = None,
    ):
        self._roles = list(roles)
        self._resource = resource
        self._attributes = list(attributes)
        self.action = action
        self.possession = possession

    @property
    def roles(self) -> List[str]:
        return list(self._roles)

    @property
    def resource(self) -> str:
        return self._resource

    @property
    def attributes(self) -> List[str]:
        return list(self._attributes)

    @property
    def granted(self) -> bool:
        """Whether the queried roles may perform the action at all."""
        return is_granted(self._attributes)

    def filter(self, data: Any) -> Any:
        """
        Project data down to the permitted attributes.

        Args:
            data: A mapping or a list of mappings; never modified

        Returns:
            Filtered copy of the data
        """
        return AttributeFilter(self._attributes).apply(data)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the permission to a dictionary.

        Returns:
            Dictionary with roles, resource, action, possession, attributes and granted
        """
        return {
            "roles": self.roles,
            "resource": self.resource,
            "action": self.action,
            "possession": self.possession,
            "attributes": self.attributes,
            "granted": self.granted,
        }

    def __bool__(self) -> bool:
        return self.granted

    def __repr__(self) -> str:
        return (
            f"Permission(roles={self._roles!r}, resource={self._resource!r}, "
            f"action={self.action!r}, possession={self.possession!r}, "
            f"attributes={self._attributes!r}, granted={self.granted})"
        )


def normalize_query(
    query: Union[QueryInfo, Mapping[str, Any]],
    default_possession: str = Possession.ANY.value,
) -> QueryInfo:
    """
    Validate and normalize a query record.

    Args:
        query: QueryInfo or a mapping with role, resource, action and optional possession
        default_possession: Possession used when the query omits it

    Returns:
        A validated QueryInfo

    Raises:
        InvalidQueryError: If the role, resource, action or possession is missing or invalid
    """
    if isinstance(query, QueryInfo):
        return query
    if not isinstance(query, Mapping) or not query:
        raise InvalidQueryError(f"Invalid query: {query!r}")
    try:
        return QueryInfo.model_validate(
            dict(query), context={"default_possession": default_possession}
        )
    except PydanticValidationError as e:
        fields = fields_from_pydantic(e.errors())
        message = "; ".join(f"{f['field'] or 'query'}: {f['message']}" for f in fields)
        raise InvalidQueryError(f"Invalid query: {message}", fields=fields)


class PermissionResolver:
    """
    Resolve permission queries against a grants store.

    Example:
        ```python
        resolver = PermissionResolver(store)
        permission = resolver.resolve(
            {"role": ["admin", "user"], "resource": "video", "action": "create:any"}
        )
        permission.granted  # True
        ```
    """

    def __init__(
        self,
        store: GrantStore,
        own_fallback_to_any: bool = True,
        default_possession: str = Possession.ANY.value,
        logger: Optional[Any] = None,
    ):
        """
        Initialize the resolver.

        Args:
            store: Grants store to read from
            own_fallback_to_any: Answer "own" queries with the "any" list when a
                role has no "own" entry for the action
            default_possession: Possession used when a query omits it
            logger: Optional logger instance
        """
        self.store = store
        self.own_fallback_to_any = own_fallback_to_any
        self.default_possession = default_possession
        self.logger = ensure_logger(logger, __name__)

    def attributes_for(self, role: str, resource: str, action: str, possession: str) -> Optional[List[str]]:
        """
        Get the attribute list a single role holds for a key.

        Args:
            role: Role name (not expanded)
            resource: Resource name
            action: Canonical action
            possession: Canonical possession

        Returns:
            The stored list, or None when the role holds nothing for the key
        """
        attributes = self.store.lookup(role, resource, permission_key(action, possession))
        if (
            attributes is None
            and self.own_fallback_to_any
            and possession == Possession.OWN.value
        ):
            attributes = self.store.lookup(
                role, resource, permission_key(action, Possession.ANY.value)
            )
        return attributes

    def resolve(self, query: Union[QueryInfo, Mapping[str, Any]]) -> Permission:
        """
        Resolve a query into a Permission.

        Roles that do not exist, or hold nothing for the resource and key,
        simply contribute no attributes.

        Args:
            query: QueryInfo or a mapping with role, resource, action and possession

        Returns:
            Permission with the unioned attribute list

        Raises:
            InvalidQueryError: If the query is missing parts or has invalid values
        """
        info = normalize_query(query, self.default_possession)

        collected: List[List[str]] = []
        for role in self.store.graph.flatten(info.role):
            attributes = self.attributes_for(
                role, info.resource, info.action, info.possession
            )
            if attributes is not None:
                collected.append(attributes)

        permission = Permission(
            roles=info.role,
            resource=info.resource,
            attributes=union_attributes(*collected),
            action=info.action,
            possession=info.possession,
        )
        self.logger.debug(
            "Resolved %s on %r for roles %r: granted=%s",
            info.key,
            info.resource,
            info.role,
            permission.granted,
        )
        return permission
