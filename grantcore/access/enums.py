"""
Action and possession enumerations.

A permission key is the lowercase ``"<action>:<possession>"`` pair, e.g.
``"read:own"``. This module owns parsing and formatting of those keys.
"""

from enum import Enum
from typing import Optional, Tuple


class Action(str, Enum):
    """
    Operation kinds a role may be granted on a resource.

    Attributes:
        CREATE: Create a resource instance
        READ: Read a resource instance
        UPDATE: Update a resource instance
        DELETE: Delete a resource instance
    """

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Possession(str, Enum):
    """
    Scope qualifier of an action.

    Attributes:
        OWN: Only instances owned by the subject
        ANY: Any instance
    """

    OWN = "own"
    ANY = "any"


ACTIONS = tuple(action.value for action in Action)
POSSESSIONS = tuple(possession.value for possession in Possession)


def parse_action_possession(
    action: str,
    possession: Optional[str] = None,
    default_possession: str = Possession.ANY.value,
) -> Tuple[str, str]:
    """
    Split and validate an action with an optional possession.

    The action may embed the possession (``"read:own"``). An explicit
    ``possession`` argument wins over the embedded one, and the default is
    used when neither is present.

    Args:
        action: Bare action ("create") or combined token ("create:own")
        possession: Explicit possession, if any
        default_possession: Possession used when none is given

    Returns:
        Tuple of canonical (action, possession) values

    Raises:
        ValueError: If the action or possession is not a known value
    """
    if isinstance(action, Enum):
        action = action.value
    if isinstance(possession, Enum):
        possession = possession.value
    if not isinstance(action, str) or not action.strip():
        raise ValueError(f"Invalid action: {action!r}")

    parts = action.split(":")
    if len(parts) > 2:
        raise ValueError(f"Invalid action: {action!r}")

    name = parts[0].strip().lower()
    if name not in ACTIONS:
        raise ValueError(f"Invalid action: {parts[0]!r}")

    embedded = parts[1] if len(parts) == 2 else None
    chosen = possession if possession is not None else embedded
    if chosen is None or (isinstance(chosen, str) and not chosen.strip()):
        chosen = default_possession
    if not isinstance(chosen, str) or chosen.strip().lower() not in POSSESSIONS:
        raise ValueError(f"Invalid action possession: {chosen!r}")

    return name, chosen.strip().lower()


def permission_key(action: str, possession: str) -> str:
    """
    Build the canonical ``"action:possession"`` key.

    Args:
        action: Canonical action value
        possession: Canonical possession value

    Returns:
        The grants tree key for the pair
    """
    return f"{action}:{possession}"
