"""
Unit tests for action and possession parsing.

Covers:
- Combined and split action/possession tokens
- Default possession handling
- Rejection of unknown actions and possessions
"""
import pytest

from grantcore.access.enums import (
    ACTIONS,
    POSSESSIONS,
    Action,
    Possession,
    parse_action_possession,
    permission_key,
)


def test_enum_values():
    assert ACTIONS == ("create", "read", "update", "delete")
    assert POSSESSIONS == ("own", "any")
    assert Action.READ == "read"
    assert Possession.OWN == "own"


@pytest.mark.parametrize(
    "args,expected",
    [
        (("create",), ("create", "any")),
        (("create", None, "own"), ("create", "own")),
        (("READ:OWN",), ("read", "own")),
        ((" update : any ",), ("update", "any")),
        (("read:own", "any"), ("read", "any")),
        (("delete", ""), ("delete", "any")),
        ((Action.UPDATE, Possession.OWN), ("update", "own")),
    ],
)
def test_parse_action_possession(args, expected):
    assert parse_action_possession(*args) == expected


@pytest.mark.parametrize(
    "action,possession",
    [
        ("fly", None),
        ("read:mine", None),
        ("read:own:extra", None),
        ("", None),
        (None, None),
        (5, None),
        (":own", None),
        ("read", "everything"),
    ],
)
def test_parse_action_possession_invalid(action, possession):
    with pytest.raises(ValueError):
        parse_action_possession(action, possession)


def test_permission_key():
    assert permission_key("read", "own") == "read:own"
