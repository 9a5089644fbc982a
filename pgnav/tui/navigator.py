"""Navigation loop over the state tree."""
from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from .state import NavigationTree, State

if TYPE_CHECKING:
    from ..context import Context
    from .router import Router

log = logging.getLogger(__name__)

BOUNCE_ROOT = "root"
BOUNCE_PARENT = "parent"
BOUNCE_POLICIES = (BOUNCE_ROOT, BOUNCE_PARENT)

# Names of the most recently visited states kept for the session log.
HISTORY_SIZE = 50


class Navigator:
    """Drives the state chain until a transition raises.

    Keeps the stack of visited states for breadcrumbs:
    - Push when a menu hands over to a child
    - On a finished action (or an empty menu) bounce back: to the root by
      default, or to the enclosing menu with ``bounce="parent"``

    There is no quit state. :meth:`run` only ends by raising, typically
    :class:`~pgnav.errors.CancelError` when the user backs out.
    """

    def __init__(self, router: Router, tree: NavigationTree, bounce: str = BOUNCE_ROOT):
        if bounce not in BOUNCE_POLICIES:
            raise ValueError(f"bounce must be one of {BOUNCE_POLICIES}, got {bounce!r}")
        self.router = router
        self.tree = tree
        self.bounce = bounce
        self.stack: list[State] = [tree.root]
        self.history: deque[str] = deque(maxlen=HISTORY_SIZE)

    def push(self, state: State) -> None:
        """Descend into a child state.

        Args:
            state: The state the current menu handed over to
        """
        self.stack.append(state)

    def pop(self) -> State | None:
        """Go back one level.

        Returns:
            The state that was popped, or None (and no change) at the root
        """
        if len(self.stack) > 1:
            return self.stack.pop()
        return None

    def home(self) -> None:
        """Reset navigation to the root menu."""
        self.stack = [self.tree.root]

    def current(self) -> State:
        """Get the state the next transition runs on.

        Returns:
            Top of the navigation stack
        """
        return self.stack[-1]

    def depth(self) -> int:
        """Get the current navigation depth.

        Returns:
            Number of states on the stack (1 at the root)
        """
        return len(self.stack)

    def breadcrumbs(self) -> str:
        """Generate the breadcrumb string.

        Returns:
            Path like ``"Back to Start > Explore > Schemas"``
        """
        return " > ".join(state.name for state in self.stack)

    def _bounce(self) -> None:
        if self.bounce == BOUNCE_PARENT:
            self.pop()
        else:
            self.home()
        log.debug("bounced to %s", self.breadcrumbs())

    def run(self, ctx: Context) -> None:
        """Run until a transition raises; the error propagates unchanged."""
        while True:
            state = self.current()
            self.history.append(state.name)
            next_state = self.router.transition(state, ctx)
            if next_state is None:
                self._bounce()
            else:
                self.push(next_state)
