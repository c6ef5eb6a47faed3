"""
Attribute filtering utilities.

This module turns a list of attribute globs into a field-filtered copy of
arbitrary data. It does not know about grants; a Permission uses it to
project resource instances, and hosts can use it directly.

Glob syntax:
    - Segments are separated by dots: ``account.balance.credit``
    - ``*`` matches any single key; as the last segment it matches every
      remaining key at that level together with its subtree
    - A leading ``!`` excludes the matched paths: ``!account.id``

Globs are applied from loose to specific: fewer segments first, and at
equal depth the ones with more wildcards first. A later, more specific glob
therefore overrides an earlier broad one, e.g. ``["*", "!account.*",
"account.id"]`` keeps everything except ``account``'s keys, but brings
``account.id`` back.
"""

import copy
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from grantcore.errors import ValidationError

Path = Tuple[Any, ...]

WILDCARD = "*"
NEGATION = "!"


class AttributeGlob:
    """
    A parsed attribute glob.

    Attributes:
        notation: The glob as written (trimmed)
        negated: True if the glob excludes paths
        path: The dotted path without the negation prefix
        segments: Path split into its segments
    """

    def __init__(self, notation: str):
        """
        Parse an attribute glob.

        Args:
            notation: Glob string such as ``"*"``, ``"!account.id"``

        Raises:
            ValidationError: If the glob is not a string or has empty segments
        """
        if not isinstance(notation, str):
            raise ValidationError(f"Invalid attribute glob: {notation!r}")

        self.notation = notation.strip()
        self.negated = self.notation.startswith(NEGATION)
        self.path = self.notation[1:].strip() if self.negated else self.notation
        self.segments = self.path.split(".")

        if any(segment.strip() == "" for segment in self.segments):
            raise ValidationError(f"Invalid attribute glob: {notation!r}")

    @property
    def depth(self) -> int:
        """Number of path segments."""
        return len(self.segments)

    @property
    def wildcards(self) -> int:
        """Number of wildcard segments."""
        return sum(1 for segment in self.segments if segment == WILDCARD)

    def matches(self, path: Sequence[Any]) -> bool:
        """
        Check whether a concrete path is selected by this glob.

        Paths below a matched level are selected too, since the glob keeps
        the whole subtree.

        Args:
            path: Sequence of keys, e.g. ``("account", "id")``

        Returns:
            True if the glob selects the path
        """
        path = [str(key) for key in path]
        if len(path) < self.depth:
            return False
        for segment, key in zip(self.segments, path):
            if segment != WILDCARD and segment != key:
                return False
        return True

    def expand(self, data: Any) -> Iterator[Path]:
        """
        Yield the concrete paths of ``data`` selected by this glob.

        Args:
            data: Mapping to expand the glob against

        Yields:
            Tuples of keys that exist in ``data``
        """
        yield from _expand(data, self.segments, ())

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the glob to a dictionary.

        Returns:
            Dictionary with notation, negated and path
        """
        return {"notation": self.notation, "negated": self.negated, "path": self.path}

    def __str__(self) -> str:
        return self.notation

    def __repr__(self) -> str:
        return f"AttributeGlob({self.notation!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, AttributeGlob):
            return self.notation == other.notation
        elif isinstance(other, str):
            return self.notation == other.strip()
        return False

    def __hash__(self) -> int:
        return hash(self.notation)


def _expand(node: Any, segments: List[str], prefix: Path) -> Iterator[Path]:
    if not segments:
        yield prefix
        return
    if not isinstance(node, Mapping):
        return

    head, rest = segments[0], segments[1:]
    if head == WILDCARD:
        keys = list(node.keys())
    else:
        keys = [key for key in node.keys() if str(key) == head]

    for key in keys:
        yield from _expand(node[key], rest, prefix + (key,))


def _get(data: Mapping, path: Path) -> Any:
    node = data
    for key in path:
        node = node[key]
    return node


def _set(target: Dict, path: Path, value: Any) -> None:
    node = target
    for key in path[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[path[-1]] = value


def _delete(target: Dict, path: Path) -> None:
    node = target
    for key in path[:-1]:
        node = node.get(key)
        if not isinstance(node, dict):
            return
    node.pop(path[-1], None)


def parse_globs(attributes: Optional[Union[str, Sequence[str]]]) -> List[AttributeGlob]:
    """
    Parse attribute globs, skipping blank entries.

    Args:
        attributes: Sequence of glob strings (or a single glob string)

    Returns:
        Parsed globs in the given order

    Raises:
        ValidationError: If attributes is not a string or a sequence of strings
    """
    if attributes is None:
        return []
    if isinstance(attributes, str):
        attributes = [attributes]
    if not isinstance(attributes, (list, tuple)):
        raise ValidationError(f"Invalid attributes: {attributes!r}")

    globs = []
    for attribute in attributes:
        if isinstance(attribute, str) and attribute.strip() == "":
            continue
        globs.append(AttributeGlob(attribute))
    return globs


def sort_globs(globs: Sequence[AttributeGlob]) -> List[AttributeGlob]:
    """
    Order globs so that more specific ones are applied last.

    Primary key is the segment count (ascending), secondary key is the
    wildcard count (descending). Ties keep their original order.

    Args:
        globs: Parsed globs

    Returns:
        A new, sorted list
    """
    return sorted(globs, key=lambda glob: (glob.depth, -glob.wildcards))


class AttributeFilter:
    """
    Projection of data through a list of attribute globs.

    The globs are parsed and sorted once, so one filter can be applied to
    many records.

    Example:
        ```python
        attribute_filter = AttributeFilter(["*", "!password"])
        attribute_filter.apply({"name": "x", "password": "y"})  # {"name": "x"}
        ```
    """

    def __init__(self, attributes: Optional[Union[str, Sequence[str]]]):
        """
        Initialize the attribute filter.

        Args:
            attributes: Attribute globs; an empty list excludes everything
        """
        self.globs = sort_globs(parse_globs(attributes))

    def filter_record(self, record: Mapping) -> Dict:
        """
        Project a single record.

        Args:
            record: Mapping to project; never modified

        Returns:
            A new dictionary holding deep copies of the permitted fields

        Raises:
            ValidationError: If the record is not a mapping
        """
        if not isinstance(record, Mapping):
            raise ValidationError(
                f"Cannot filter a value of type {type(record).__name__}; "
                "expected a mapping or a sequence of mappings"
            )

        result: Dict = {}
        for glob in self.globs:
            if glob.negated:
                for path in list(glob.expand(result)):
                    _delete(result, path)
            else:
                for path in glob.expand(record):
                    _set(result, path, copy.deepcopy(_get(record, path)))
        return result

    def keeps(self, path: Sequence[Any]) -> bool:
        """
        Check whether this filter keeps a path of a record.

        The last glob (in application order) selecting the path decides.

        Args:
            path: Sequence of keys, e.g. ``("account", "id")``

        Returns:
            True if the path survives the filter
        """
        kept = False
        for glob in self.globs:
            if glob.matches(path):
                kept = not glob.negated
        return kept

    def apply(self, data: Any) -> Any:
        """
        Project a record or a sequence of records.

        Args:
            data: A mapping, or a list/tuple of mappings

        Returns:
            A filtered dictionary, or a list of them with the same length and order

        Raises:
            ValidationError: If data is neither a mapping nor a sequence of mappings
        """
        if isinstance(data, (list, tuple)):
            return [self.filter_record(item) for item in data]
        return self.filter_record(data)


def filter_data(data: Any, attributes: Optional[Union[str, Sequence[str]]]) -> Any:
    """
    Filter data through attribute globs.

    Args:
        data: A mapping, or a list/tuple of mappings; never modified
        attributes: Attribute globs

    Returns:
        Deep, independent projection of the data

    Example:
        ```python
        filter_data({"a": 1, "b": 2}, ["*", "!b"])  # {"a": 1}
        filter_data({"a": 1}, [])  # {}
        ```
    """
    return AttributeFilter(attributes).apply(data)
