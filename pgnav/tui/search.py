"""Incremental search predicates for the selector."""
from __future__ import annotations

import re
from typing import Any, Callable, Sequence

from .template import bind_fields, display_value

SearchPredicate = Callable[[str, Any], bool]

_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lower-case *text* and drop all whitespace."""
    return _WHITESPACE.sub("", str(text).lower())


def matches(query: str, text: str) -> bool:
    """Whitespace- and case-insensitive containment; empty query matches."""
    q = normalize(query)
    if not q:
        return True
    return q in normalize(text)


def field_predicate(*fields: str, sep: str = ".") -> SearchPredicate:
    """Build a predicate over the named fields of an item joined by *sep*.

    ``field_predicate("schema", "name")`` lets ``"public.us"`` find
    ``public.users``. With no fields the item's string form is searched.
    """

    def predicate(query: str, item: Any) -> bool:
        if not fields:
            return matches(query, display_value(item))
        values = bind_fields(item)
        haystack = sep.join(display_value(values.get(f)) for f in fields)
        return matches(query, haystack)

    return predicate


name_predicate = field_predicate("name")


def filter_indices(items: Sequence[Any], predicate: SearchPredicate | None, query: str) -> list[int]:
    """Indices of the items matching *query*, in their original order."""
    if predicate is None or not normalize(query):
        return list(range(len(items)))
    return [i for i, item in enumerate(items) if predicate(query, item)]
