"""State transitions: one dispatch over the Menu | Action variant."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import CancelError, ProviderError
from .search import name_predicate
from .state import SENTINEL_TEMPLATE, Action, Menu, State

if TYPE_CHECKING:
    from ..context import Context
    from .selector import Selector

log = logging.getLogger(__name__)


class Router:
    """Resolves a state to the next one.

    A return value of None means "done here": the navigator bounces back to
    the root (or parent). Errors are never swallowed.
    """

    def __init__(self, selector: Selector):
        self.selector = selector

    def transition(self, state: State, ctx: Context) -> State | None:
        if isinstance(state, Menu):
            return self._menu(state, ctx)
        if isinstance(state, Action):
            return self._action(state, ctx)
        raise TypeError(f"unknown state type: {type(state).__name__}")

    def _menu(self, menu: Menu, ctx: Context) -> State | None:
        if not menu.children:
            log.debug("menu %r has no children, bouncing", menu.name)
            return None
        index = self.selector.select(ctx, menu.label, menu.children, name_predicate, menu.template)
        if index is None:
            return None
        return menu.children[index]

    def _action(self, action: Action, ctx: Context) -> None:
        ctx.raise_if_cancelled()
        try:
            items = list(action.provider.fetch(ctx))
        except (CancelError, ProviderError):
            raise
        except Exception as e:
            raise ProviderError(f"{action.name}: {e}", e) from e
        log.info("action %r fetched %d rows", action.name, len(items))

        view = action.view
        template, predicate = view.template, view.predicate
        if not items:
            items = [view.sentinel()]
            template, predicate = SENTINEL_TEMPLATE, None
        self.selector.select(ctx, view.label, items, predicate, template)
        return None
