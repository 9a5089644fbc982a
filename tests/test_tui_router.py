"""Unit tests for state transitions."""
from __future__ import annotations

import pytest

from pgnav.context import Context
from pgnav.errors import CancelError, ProviderError, ProviderTimeoutError
from pgnav.providers import StaticProvider
from pgnav.tui.router import Router
from pgnav.tui.search import field_predicate
from pgnav.tui.state import SENTINEL_TEMPLATE, Action, Menu, Sentinel, View
from pgnav.tui.template import RenderTemplate


class _SpySelector:
    """Records select() calls and answers with a scripted index."""

    def __init__(self, answer=0, raises=None):
        self.answer = answer
        self.raises = raises
        self.calls = []

    def select(self, ctx, label, items, predicate=None, template=None):
        self.calls.append(
            {"label": label, "items": list(items), "predicate": predicate, "template": template}
        )
        if self.raises is not None:
            raise self.raises
        return self.answer


class _FailingProvider:
    def __init__(self, exc):
        self.exc = exc

    def fetch(self, ctx):
        raise self.exc


def test_empty_menu_bounces_without_selecting():
    selector = _SpySelector()
    assert Router(selector).transition(Menu("PlayGround", "PlayGround"), Context()) is None
    assert selector.calls == []


def test_menu_returns_chosen_child():
    a, b = Action("All", StaticProvider()), Action("User Created", StaticProvider())
    selector = _SpySelector(answer=1)
    menu = Menu("Schemas", "Schema Options", (a, b))
    assert Router(selector).transition(menu, Context()) is b
    call = selector.calls[0]
    assert call["label"] == "Schema Options"
    assert call["items"] == [a, b]
    assert call["predicate"]("user", b) and not call["predicate"]("user", a)
    assert call["template"] is menu.template


def test_menu_propagates_selector_cancel():
    menu = Menu("Schemas", "Schema Options", (Action("All", StaticProvider()),))
    with pytest.raises(CancelError):
        Router(_SpySelector(raises=CancelError())).transition(menu, Context())


def test_action_presents_rows_then_bounces():
    rows = [{"schema": "public", "name": "users"}, {"schema": "public", "name": "orders"}]
    template = RenderTemplate(active="» {schema}.{name}", inactive="  {schema}.{name}")
    predicate = field_predicate("schema", "name")
    action = Action("Tables", StaticProvider(rows), View("Tables", template, predicate))
    selector = _SpySelector(answer=1)
    assert Router(selector).transition(action, Context()) is None
    call = selector.calls[0]
    assert call["items"] == rows
    assert call["template"] is template
    assert call["predicate"] is predicate


def test_empty_rows_get_exactly_one_sentinel():
    action = Action(
        "Materialized",
        StaticProvider([]),
        View("Materialized Views", RenderTemplate(), field_predicate("schema", "name")),
    )
    selector = _SpySelector(answer=0)
    assert Router(selector).transition(action, Context()) is None
    call = selector.calls[0]
    assert call["items"] == [Sentinel()]
    assert call["template"] is SENTINEL_TEMPLATE
    assert call["predicate"] is None


def test_custom_sentinel_factory():
    view = View("Views", sentinel=lambda: {"name": "nothing here"})
    selector = _SpySelector()
    Router(selector).transition(Action("All", StaticProvider(), view), Context())
    assert selector.calls[0]["items"] == [{"name": "nothing here"}]


def test_provider_errors_are_fatal_and_typed():
    timeout = ProviderTimeoutError("slow")
    selector = _SpySelector()
    with pytest.raises(ProviderTimeoutError):
        Router(selector).transition(Action("Tables", _FailingProvider(timeout)), Context())
    with pytest.raises(ProviderError) as info:
        Router(selector).transition(Action("Tables", _FailingProvider(RuntimeError("boom"))), Context())
    assert isinstance(info.value.cause, RuntimeError)
    assert "Tables" in str(info.value)
    assert selector.calls == []


def test_action_observes_cancellation_before_fetching():
    ctx = Context()
    ctx.cancel()
    with pytest.raises(CancelError):
        Router(_SpySelector()).transition(Action("Tables", _FailingProvider(AssertionError())), ctx)


def test_unknown_state_type_rejected():
    with pytest.raises(TypeError):
        Router(_SpySelector()).transition("main_menu", Context())
