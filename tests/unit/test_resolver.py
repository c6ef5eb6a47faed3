"""
Unit tests for permission resolution.

Covers:
- Union of attribute lists across queried and inherited roles
- The granted flag, including negation-only lists
- "own" queries answered by "any" grants
- Query validation errors
"""
import pytest

from grantcore.access.resolver import (
    Permission,
    PermissionResolver,
    is_granted,
    normalize_query,
    union_attributes,
)
from grantcore.access.store import GrantStore
from grantcore.errors import InvalidQueryError


@pytest.fixture
def store():
    return GrantStore(
        {
            "user": {
                "video": {"read:any": ["title", "body"], "update:own": ["title"]},
                "photo": {"read:own": ["!exif"]},
            },
            "editor": {"$extend": ["user"], "video": {"read:any": ["body", "tags"]}},
            "auditor": {"video": {"read:any": ["*", "!body"]}},
        }
    )


@pytest.fixture
def resolver(store):
    return PermissionResolver(store)


def test_union_attributes_first_seen_order():
    assert union_attributes(["a", "b"], ["b", "c"], [], ["a"]) == ["a", "b", "c"]


def test_union_drops_negation_granted_by_another_list():
    assert union_attributes(["password"], ["*", "!password"]) == ["password", "*"]
    assert union_attributes(["*", "!password"], ["password"]) == ["*", "password"]
    assert union_attributes(["account.*"], ["*", "!account.id"]) == ["account.*", "*"]


def test_union_keeps_negation_nobody_grants():
    assert union_attributes(["name"], ["*", "!password"]) == ["name", "*", "!password"]
    assert union_attributes(["*", "!a"], ["*", "!a"]) == ["*", "!a"]
    assert union_attributes(["!x"]) == ["!x"]


@pytest.mark.parametrize(
    "attributes,expected",
    [
        (["*"], True),
        (["title"], True),
        (["*", "!title"], True),
        (["!title"], False),
        (["!a", "!b"], False),
        ([], False),
        ([""], False),
    ],
)
def test_is_granted(attributes, expected):
    assert is_granted(attributes) is expected


def test_inherited_attributes_are_unioned(resolver):
    permission = resolver.resolve({"role": "editor", "resource": "video", "action": "read:any"})
    assert permission.attributes == ["body", "tags", "title"]
    assert permission.granted is True
    assert permission.roles == ["editor"]


def test_multiple_roles_are_unioned(resolver):
    permission = resolver.resolve(
        {"role": ["user", "auditor"], "resource": "video", "action": "read"}
    )
    assert permission.attributes == ["title", "body", "*"]


def test_no_grant_is_empty_and_not_granted(resolver):
    permission = resolver.resolve({"role": "user", "resource": "video", "action": "delete:any"})
    assert permission.granted is False
    assert permission.attributes == []
    assert permission.filter({"title": "x"}) == {}


def test_unknown_role_contributes_nothing(resolver):
    permission = resolver.resolve({"role": "ghost", "resource": "video", "action": "read"})
    assert permission.granted is False
    assert permission.attributes == []


def test_negation_only_is_not_granted(resolver):
    permission = resolver.resolve({"role": "user", "resource": "photo", "action": "read:own"})
    assert permission.attributes == ["!exif"]
    assert permission.granted is False
    assert bool(permission) is False


def test_own_falls_back_to_any(resolver):
    permission = resolver.resolve({"role": "user", "resource": "video", "action": "read:own"})
    assert permission.attributes == ["title", "body"]


def test_own_entry_wins_over_any(store):
    store.set_permission("user", "video", "read:own", ["body"])
    resolver = PermissionResolver(store)
    permission = resolver.resolve({"role": "user", "resource": "video", "action": "read:own"})
    assert permission.attributes == ["body"]


def test_own_fallback_can_be_disabled(store):
    resolver = PermissionResolver(store, own_fallback_to_any=False)
    permission = resolver.resolve({"role": "user", "resource": "video", "action": "read:own"})
    assert permission.granted is False


def test_any_does_not_fall_back_to_own(resolver):
    permission = resolver.resolve({"role": "user", "resource": "video", "action": "update:any"})
    assert permission.granted is False


def test_default_possession(store):
    resolver = PermissionResolver(store, default_possession="own")
    permission = resolver.resolve({"role": "user", "resource": "video", "action": "update"})
    assert permission.possession == "own"
    assert permission.attributes == ["title"]


def test_permission_filter(resolver):
    permission = resolver.resolve({"role": "auditor", "resource": "video", "action": "read"})
    assert permission.filter({"title": "t", "body": "b"}) == {"title": "t"}
    assert permission.filter([{"body": "b"}, {"id": 1}]) == [{}, {"id": 1}]


def test_permission_accessors_return_copies():
    permission = Permission(["user"], "video", ["*"], "read", "any")
    permission.attributes.append("!x")
    permission.roles.append("admin")
    assert permission.attributes == ["*"]
    assert permission.roles == ["user"]
    assert permission.to_dict() == {
        "roles": ["user"],
        "resource": "video",
        "action": "read",
        "possession": "any",
        "attributes": ["*"],
        "granted": True,
    }
    assert "granted=True" in repr(permission)


@pytest.mark.parametrize(
    "query",
    [
        None,
        {},
        "user",
        {"resource": "video", "action": "read"},
        {"role": "user", "action": "read"},
        {"role": "user", "resource": "video"},
        {"role": "user", "resource": "video", "action": "fly"},
        {"role": "user", "resource": "video", "action": "read", "possession": "x"},
    ],
)
def test_invalid_queries(resolver, query):
    with pytest.raises(InvalidQueryError) as exc:
        resolver.resolve(query)
    assert exc.value.code == "INVALID_QUERY"
    assert exc.value.status_code == 400


def test_invalid_query_reports_fields():
    with pytest.raises(InvalidQueryError) as exc:
        normalize_query({"role": "user", "action": "read"})
    assert any(field["field"] == "resource" for field in exc.value.fields)


@pytest.mark.parametrize("roles", [["owner", "viewer"], ["viewer", "owner"]])
def test_role_order_does_not_change_filtered_result(roles):
    store = GrantStore(
        {
            "owner": {"user": {"read:any": ["password"]}},
            "viewer": {"user": {"read:any": ["*", "!password"]}},
        }
    )
    permission = PermissionResolver(store).resolve(
        {"role": roles, "resource": "user", "action": "read"}
    )
    assert permission.filter({"name": "n", "password": "p"}) == {"name": "n", "password": "p"}
