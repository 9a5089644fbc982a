"""Navigation tree nodes.

A state is either a :class:`Menu`, which presents its children through the
selector, or an :class:`Action`, which fetches rows from a data provider and
presents them. The tree is built once at startup and never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterator, Union

from .search import SearchPredicate
from .template import MENU_TEMPLATE, RenderTemplate

if TYPE_CHECKING:
    from ..providers import Provider


@dataclass(frozen=True)
class Sentinel:
    """Placeholder row shown when a provider returns nothing."""

    name: str = "no results, back to start"


SENTINEL_TEMPLATE = RenderTemplate(
    label="{label}",
    active="» {name:bold yellow}",
    inactive="  {name:yellow}",
)


@dataclass(frozen=True)
class View:
    """How an action presents its rows."""

    label: str
    template: RenderTemplate | None = None
    predicate: SearchPredicate | None = None
    sentinel: Callable[[], Any] = Sentinel


@dataclass(frozen=True, eq=False)
class Menu:
    name: str
    label: str
    children: tuple[State, ...] = ()
    template: RenderTemplate = MENU_TEMPLATE

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))


@dataclass(frozen=True, eq=False)
class Action:
    name: str
    provider: Provider
    view: View = field(default_factory=lambda: View(label=""))

    def __post_init__(self) -> None:
        if not self.view.label:
            object.__setattr__(self, "view", View(
                label=self.name,
                template=self.view.template,
                predicate=self.view.predicate,
                sentinel=self.view.sentinel,
            ))


State = Union[Menu, Action]


class NavigationTree:
    """All states reachable from ``root``; read-only after construction."""

    def __init__(self, root: Menu):
        if not isinstance(root, Menu):
            raise TypeError("navigation root must be a Menu")
        if not root.children:
            # Every bounce lands on the root; an empty root would spin forever.
            raise ValueError("navigation root has no children")
        self.root = root
        self._parents: dict[State, Menu] = {}
        for _, state in self.walk():
            if isinstance(state, Menu):
                for child in state.children:
                    self._parents.setdefault(child, state)

    def walk(self) -> Iterator[tuple[tuple[str, ...], State]]:
        """Yield ``(path, state)`` depth-first, root first."""
        stack: list[tuple[tuple[str, ...], State]] = [((self.root.name,), self.root)]
        seen: set[int] = set()
        while stack:
            path, state = stack.pop()
            if id(state) in seen:
                continue
            seen.add(id(state))
            yield path, state
            if isinstance(state, Menu):
                for child in reversed(state.children):
                    stack.append((path + (child.name,), child))

    def find(self, *names: str) -> State:
        """Follow child names from the root: ``tree.find("Explore", "Schemas")``."""
        state: State = self.root
        for name in names:
            if not isinstance(state, Menu):
                raise KeyError(" > ".join(names))
            state = next((c for c in state.children if c.name == name), None)
            if state is None:
                raise KeyError(" > ".join(names))
        return state

    def parent_of(self, state: State) -> Menu | None:
        return self._parents.get(state)

    def to_dict(self, state: State | None = None) -> dict[str, Any]:
        """Plain-data shape of the tree, for inspection and tests."""
        state = self.root if state is None else state
        if isinstance(state, Menu):
            return {
                "name": state.name,
                "kind": "menu",
                "label": state.label,
                "children": [self.to_dict(c) for c in state.children],
            }
        return {
            "name": state.name,
            "kind": "action",
            "label": state.view.label,
            "searchable": state.view.predicate is not None,
        }
