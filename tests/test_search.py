"""Unit tests for selector search predicates."""
from __future__ import annotations

from dataclasses import dataclass

from pgnav.tui.search import field_predicate, filter_indices, matches, name_predicate, normalize


@dataclass
class _Row:
    schema: str
    name: str


def test_normalize_lowercases_and_strips_whitespace():
    assert normalize("  Table Count\tPer\nSchema ") == "tablecountperschema"


def test_empty_query_matches_everything():
    for item in [_Row("public", "users"), {"name": ""}, "anything"]:
        assert name_predicate("", item) is True
        assert field_predicate("schema", "name")("", item) is True
        assert field_predicate()("   ", item) is True


def test_whitespace_insensitive_match():
    item = {"name": "Table Count Per Schema"}
    assert name_predicate("tablecount", item)
    assert name_predicate("TABLE COUNT PER SCHEMA", item)
    assert name_predicate("count per", item)
    assert not name_predicate("size", item)


def test_schema_dot_table_predicate():
    predicate = field_predicate("schema", "name")
    row = _Row("public", "users")
    assert predicate("public.us", row)
    assert predicate("c.u", row)
    assert not predicate("private", row)


def test_missing_field_is_treated_as_empty():
    predicate = field_predicate("schema", "name")
    assert predicate("users", {"name": "users"})


def test_plain_items_search_their_string_form():
    assert field_predicate()("postgresql 16", "PostgreSQL 16.2 on x86_64")
    assert not field_predicate()("pg 16", "PostgreSQL 16.2 on x86_64")
    assert matches("", "")


def test_filter_preserves_original_order():
    items = [{"name": n} for n in ["orders", "users", "order_items", "audit", "user_orders"]]
    assert filter_indices(items, name_predicate, "order") == [0, 2, 4]
    assert filter_indices(items, name_predicate, "") == [0, 1, 2, 3, 4]
    assert [i["name"] for i in items] == ["orders", "users", "order_items", "audit", "user_orders"]


def test_filter_without_predicate_shows_everything():
    assert filter_indices(["a", "b"], None, "zzz") == [0, 1]
