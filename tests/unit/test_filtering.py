"""
Unit tests for attribute filtering.

Covers:
- Glob parsing, ordering and matching
- Projection of single records and lists of records
- Negation and override order
- Source immutability and independence of the result
"""
import copy

import pytest

from grantcore.access.filtering import (
    AttributeFilter,
    AttributeGlob,
    filter_data,
    parse_globs,
    sort_globs,
)
from grantcore.errors import ValidationError


@pytest.fixture
def record():
    return {
        "id": 1,
        "name": "John",
        "age": 30,
        "account": {
            "id": 99,
            "balance": {"credit": 100, "debit": 20},
            "tags": ["a", {"secret": True}],
        },
    }


class TestAttributeGlob:
    """Tests for AttributeGlob parsing and matching."""

    def test_parse(self):
        glob = AttributeGlob(" !account.* ")
        assert glob.notation == "!account.*"
        assert glob.negated is True
        assert glob.path == "account.*"
        assert glob.segments == ["account", "*"]
        assert glob.depth == 2
        assert glob.wildcards == 1
        assert str(glob) == "!account.*"
        assert glob.to_dict() == {"notation": "!account.*", "negated": True, "path": "account.*"}

    @pytest.mark.parametrize("notation", ["a..b", ".a", "!", 5, None])
    def test_invalid(self, notation):
        with pytest.raises(ValidationError):
            AttributeGlob(notation)

    @pytest.mark.parametrize(
        "notation,path,expected",
        [
            ("*", ("name",), True),
            ("account.id", ("account", "id"), True),
            ("account.id", ("account",), False),
            ("account", ("account", "id"), True),
            ("*.id", ("account", "id"), True),
            ("*.id", ("account", "balance"), False),
        ],
    )
    def test_matches(self, notation, path, expected):
        assert AttributeGlob(notation).matches(path) is expected

    def test_equality(self):
        assert AttributeGlob("a.b") == AttributeGlob(" a.b ")
        assert AttributeGlob("a.b") == "a.b"
        assert AttributeGlob("a.b") != 1
        assert len({AttributeGlob("a"), AttributeGlob("a")}) == 1


def test_parse_globs_skips_blank_entries():
    assert [str(g) for g in parse_globs(["", "  ", "*"])] == ["*"]
    assert parse_globs(None) == []
    assert [str(g) for g in parse_globs("name")] == ["name"]
    with pytest.raises(ValidationError):
        parse_globs({"a": 1})


def test_sort_globs_loose_to_specific():
    globs = parse_globs(["account.id", "!account.*", "*", "name", "*.x"])
    assert [str(g) for g in sort_globs(globs)] == [
        "*",
        "name",
        "!account.*",
        "*.x",
        "account.id",
    ]


def test_sort_globs_is_stable():
    globs = parse_globs(["b", "a", "!c"])
    assert [str(g) for g in sort_globs(globs)] == ["b", "a", "!c"]


def test_wildcard_keeps_everything(record):
    assert filter_data(record, ["*"]) == record


@pytest.mark.parametrize("attributes", [[], [""], ["  "]])
def test_empty_attributes_yield_empty_record(record, attributes):
    assert filter_data(record, attributes) == {}


def test_negation_removes_field(record):
    result = filter_data(record, ["*", "!age"])
    assert "age" not in result
    assert result["name"] == "John"


def test_negation_only_yields_empty_record(record):
    assert filter_data(record, ["!age"]) == {}


def test_nested_selection(record):
    assert filter_data(record, ["account.balance.credit", "name"]) == {
        "name": "John",
        "account": {"balance": {"credit": 100}},
    }


def test_specific_glob_overrides_broad_negation(record):
    result = filter_data(record, ["*", "!account.*", "account.id"])
    assert result["account"] == {"id": 99}
    assert result["name"] == "John"


def test_negated_wildcard_leaves_empty_parent(record):
    result = filter_data(record, ["*", "!account.*"])
    assert result["account"] == {}


def test_globs_do_not_descend_into_lists(record):
    result = filter_data(record, ["account.tags.secret"])
    assert result == {}
    result = filter_data(record, ["account.tags"])
    assert result == {"account": {"tags": ["a", {"secret": True}]}}


def test_missing_paths_are_ignored(record):
    assert filter_data(record, ["nope", "name.first"]) == {}


def test_source_is_never_mutated(record):
    original = copy.deepcopy(record)
    filter_data(record, ["*", "!account.balance"])
    assert record == original


def test_result_is_independent(record):
    result = filter_data(record, ["*"])
    result["account"]["balance"]["credit"] = 0
    result["account"]["tags"].append("x")
    assert record["account"]["balance"]["credit"] == 100
    assert len(record["account"]["tags"]) == 2


def test_list_of_records(record):
    other = {"id": 2, "name": "Jane", "age": 25}
    result = filter_data([record, other], ["name"])
    assert result == [{"name": "John"}, {"name": "Jane"}]


def test_filter_is_reusable(record):
    attribute_filter = AttributeFilter(["id"])
    assert attribute_filter.apply(record) == {"id": 1}
    assert attribute_filter.apply({"id": 5, "x": 1}) == {"id": 5}


@pytest.mark.parametrize("data", ["text", 5, None, ["ok", 1]])
def test_non_mapping_input_rejected(data):
    with pytest.raises(ValidationError):
        filter_data(data, ["*"])


@pytest.mark.parametrize(
    "attributes,path,expected",
    [
        (["*"], ("password",), True),
        (["*", "!password"], ("password",), False),
        (["*", "!account.*", "account.id"], ("account", "id"), True),
        (["*", "!account.*", "account.id"], ("account", "name"), False),
        (["account"], ("account", "id"), True),
        (["name"], ("password",), False),
        ([], ("name",), False),
    ],
)
def test_filter_keeps(attributes, path, expected):
    assert AttributeFilter(attributes).keeps(path) is expected
