"""Data providers: where action states get their rows from."""
from __future__ import annotations

from typing import Any, Callable, Protocol, Sequence

from ..context import Context


class Provider(Protocol):
    def fetch(self, ctx: Context) -> Sequence[Any]: ...


class StaticProvider:
    """Serves a fixed list of rows."""

    def __init__(self, items: Sequence[Any] = ()):
        self.items = list(items)

    def fetch(self, ctx: Context) -> list[Any]:
        ctx.raise_if_cancelled()
        return list(self.items)


class QueryProvider:
    """Adapts one query method of a client, e.g. ``PostgresClient.schemas``."""

    def __init__(self, query: Callable[[Context], Sequence[Any]]):
        self.query = query

    def fetch(self, ctx: Context) -> list[Any]:
        return list(self.query(ctx))

    def __repr__(self) -> str:
        return f"QueryProvider({getattr(self.query, '__name__', self.query)!r})"


__all__ = ["Provider", "QueryProvider", "StaticProvider"]
