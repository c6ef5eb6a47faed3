"""
Role hierarchy (inheritance) resolution.

A role that extends another role inherits all of its permissions. This
module walks the extend edges of the grants tree, computes the flattened
role set of a query and validates new edges so that no role ever extends
itself, directly or through a chain of other roles.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from grantcore.errors import HierarchyError, NotFoundError, ValidationError
from grantcore.logging import ensure_logger

from .models import RoleEntry, to_name_list


class RoleGraph:
    """
    Inheritance graph over the role entries of a grants tree.

    The graph does not copy the entries; it reads and mutates the mapping it
    is given, so it always reflects the current state of the owning store.

    Example:
        ```python
        graph = RoleGraph(entries)
        graph.extend("admin", "user")
        graph.hierarchy_of("admin")  # ["admin", "user"]
        ```
    """

    def __init__(
        self,
        entries: Dict[str, RoleEntry],
        guard: Optional[Callable[[], None]] = None,
        logger: Optional[Any] = None,
    ):
        """
        Initialize the role graph.

        Args:
            entries: Role name -> RoleEntry mapping of the grants tree
            guard: Optional callable invoked before any mutation; it raises
                to refuse the change (e.g. when grants are locked)
            logger: Optional logger instance, usually the owning store's
        """
        self._entries = entries
        self._guard = guard
        self.logger = ensure_logger(logger, __name__)

    def hierarchy_of(self, role: str) -> List[str]:
        """
        Get a role followed by every role it inherits from.

        Extenders are listed depth-first, pre-order, first extend first.
        Each role appears once even if it is reachable through several paths.

        Args:
            role: Role name

        Returns:
            List starting with ``role``; just ``[role]`` for an unknown role
        """
        order: List[str] = []
        self._visit(role, order)
        return order

    def _visit(self, role: str, order: List[str]) -> None:
        if role in order:
            return
        order.append(role)
        entry = self._entries.get(role)
        if entry is None:
            return
        for extender in entry.extend:
            self._visit(extender, order)

    def inherited_roles_of(self, role: str) -> List[str]:
        """
        Get the roles a role inherits from (the role itself excluded).

        Args:
            role: Role name

        Returns:
            Inherited role names in hierarchy order

        Raises:
            NotFoundError: If the role does not exist
        """
        if role not in self._entries:
            raise NotFoundError(resource_type="Role", resource_id=role)
        return self.hierarchy_of(role)[1:]

    def flatten(self, roles: Any) -> List[str]:
        """
        Union the hierarchies of one or more roles.

        Args:
            roles: A role name or a list of role names

        Returns:
            De-duplicated role names in first-seen order
        """
        if isinstance(roles, str):
            roles = [roles]
        flat: List[str] = []
        for role in roles:
            for name in self.hierarchy_of(role):
                if name not in flat:
                    flat.append(name)
        return flat

    def non_existent_roles(self, names: Iterable[str]) -> List[str]:
        """
        Get the given role names that are absent from the grants tree.

        Args:
            names: Role names to check

        Returns:
            Missing names, in the order given
        """
        return [name for name in names if name not in self._entries]

    def cross_extending_role(self, role: str, extenders: Iterable[str]) -> Optional[str]:
        """
        Find an extender that already inherits from ``role``.

        Adding an edge ``role -> extender`` when the extender already
        inherits ``role`` would close a cycle.

        Args:
            role: Role that would be extended
            extenders: Candidate extender roles

        Returns:
            The first offending extender, or None
        """
        for extender in extenders:
            if role in self.hierarchy_of(extender)[1:]:
                return extender
        return None

    def extend(self, roles: Any, extenders: Any) -> None:
        """
        Make role(s) inherit the permissions of extender role(s).

        Pairs are applied left to right and are not rolled back: if a later
        pair fails, the pairs before it stay applied. Roles being extended
        are created when missing; extenders must already exist.

        Args:
            roles: Role name(s) to extend
            extenders: Role name(s) to inherit from

        Raises:
            ValidationError: If a name is invalid or an extender does not exist
            HierarchyError: If a role would extend itself or close a cycle
        """
        if self._guard is not None:
            self._guard()

        try:
            role_names = to_name_list(roles, "role")
            extender_names = to_name_list(extenders, "role")
        except ValueError as e:
            raise ValidationError(str(e))

        for role in role_names:
            for extender in extender_names:
                self._add_edge(role, extender)

    def _add_edge(self, role: str, extender: str) -> None:
        if role == extender:
            raise HierarchyError(
                f'Cannot extend role "{role}" by itself.',
                role=role,
                extender=extender,
            )
        if extender not in self._entries:
            raise ValidationError(
                f'Cannot extend with non-existent role: "{extender}"',
                details={"role": role, "extender": extender},
            )
        if self.cross_extending_role(role, [extender]) is not None:
            raise HierarchyError(
                f'Cannot extend role "{role}" with "{extender}": '
                f'"{extender}" already inherits "{role}".',
                role=role,
                extender=extender,
            )

        entry = self._entries.setdefault(role, RoleEntry())
        if extender not in entry.extend:
            entry.extend.append(extender)
            self.logger.debug("Role %r now extends %r", role, extender)
