"""Incremental fuzzy-search list picker.

:class:`Selector` blocks on keystrokes from a :class:`~.terminal.Terminal`,
re-filtering the full item list on every edit of the query and redrawing the
matching rows in their original order. Whatever the outcome, a session ends
by collapsing its frame to a single footer line and erasing it again with
:data:`~.terminal.ERASE_PREV_LINE`, so repeated navigation leaves nothing
behind on screen.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

import readchar
from rich.console import Console
from rich.markup import escape

from ..context import Context
from ..errors import CancelError, SelectorIOError
from .search import SearchPredicate, filter_indices
from .template import RenderTemplate, plain, to_ansi
from .terminal import ERASE_PREV_LINE, Terminal

log = logging.getLogger(__name__)

CTRL_C = "\x03"
CTRL_N = "\x0e"
CTRL_P = "\x10"
ENTER_KEYS = {"\r", "\n", readchar.key.ENTER}
BACKSPACE_KEYS = {"\x7f", "\x08", readchar.key.BACKSPACE}
CANCEL_KEYS = {readchar.key.ESC, CTRL_C}
UP_KEYS = {readchar.key.UP, CTRL_P}
DOWN_KEYS = {readchar.key.DOWN, CTRL_N}

CLEAR_TO_END = "\x1b[J"

# Used only to draw rows when the caller supplies no template.
_PLAIN_TEMPLATE = RenderTemplate()


def viewport_height(rows: int | None, template: RenderTemplate | None) -> int:
    """Number of list rows that fit on screen.

    ``rows - 4 - detail_lines``, floored at 1. Without a template or a usable
    terminal height the list shows a single row.
    """
    if template is None or rows is None or rows < 4:
        return 1
    return max(1, rows - 4 - template.detail_lines)


class _Session:
    """Mutable state of one ``select`` call."""

    def __init__(self, items, predicate, template, height):
        self.items = items
        self.predicate = predicate
        self.template = template
        self.height = height
        self.query = ""
        self.cursor = 0
        self.top = 0
        self.visible = filter_indices(items, predicate, "")

    @property
    def searching(self) -> bool:
        return self.predicate is not None

    def refilter(self) -> None:
        self.visible = filter_indices(self.items, self.predicate, self.query)
        self.cursor = 0
        self.top = 0

    def move(self, delta: int) -> None:
        if not self.visible:
            return
        self.cursor = min(max(self.cursor + delta, 0), len(self.visible) - 1)
        if self.cursor < self.top:
            self.top = self.cursor
        elif self.cursor >= self.top + self.height:
            self.top = self.cursor - self.height + 1

    def chosen(self) -> int | None:
        if not self.visible:
            return None
        return self.visible[self.cursor]

    def handle(self, key: str) -> int | None:
        """Apply one keystroke; return the chosen original index on Enter."""
        if key in CANCEL_KEYS:
            raise CancelError()
        if key in ENTER_KEYS:
            return self.chosen()
        if key in UP_KEYS or (not self.searching and key == "k"):
            self.move(-1)
        elif key in DOWN_KEYS or (not self.searching and key == "j"):
            self.move(1)
        elif key == readchar.key.PAGE_UP:
            self.move(-self.height)
        elif key == readchar.key.PAGE_DOWN:
            self.move(self.height)
        elif key == readchar.key.HOME:
            self.move(-len(self.visible))
        elif key == readchar.key.END:
            self.move(len(self.visible))
        elif key in BACKSPACE_KEYS:
            if self.searching and self.query:
                self.query = self.query[:-1]
                self.refilter()
        elif self.searching and len(key) == 1 and key.isprintable():
            self.query += key
            self.refilter()
        return None

    def lines(self, label: str) -> list[str]:
        template = self.template or _PLAIN_TEMPLATE
        head = f"[bold]?[/bold] {template.render_label(label)}"
        if self.searching:
            head += f" [dim]Search:[/dim] {escape(self.query)}"
        out = [head]
        if not self.visible:
            out.append("  [dim]No results[/dim]")
            return out
        window = self.visible[self.top:self.top + self.height]
        for offset, index in enumerate(window):
            slot = "active" if self.top + offset == self.cursor else "inactive"
            out.append(template.render(slot, self.items[index]))
        if self.template is not None:
            out.extend(self.template.render_details(self.items[self.visible[self.cursor]]))
        return out


class Selector:
    """Blocking, single-session list picker bound to a terminal driver."""

    def __init__(self, terminal: Terminal, *, console: Console | None = None):
        self.terminal = terminal
        self.console = console or Console(force_terminal=True, highlight=False)
        self._drawn = 0

    def height_for(self, template: RenderTemplate | None) -> int:
        """Viewport height for *template* on the current terminal."""
        if template is None:
            return 1
        try:
            _, rows = self.terminal.size()
        except SelectorIOError as e:
            log.debug("terminal size unavailable, using one row: %s", e)
            return 1
        return viewport_height(rows, template)

    def _width(self) -> int | None:
        try:
            columns, _ = self.terminal.size()
        except SelectorIOError:
            return None
        return columns

    def _draw(self, lines: list[str]) -> None:
        width = self._width()
        frame = "".join(to_ansi(line, self.console, width) + "\n" for line in lines)
        if self._drawn:
            frame = f"\x1b[{self._drawn}F{CLEAR_TO_END}" + frame
        self.terminal.write(frame)
        # Screen lines, not markup lines: the next redraw climbs exactly this far.
        self._drawn = frame.count("\n")

    def _finish(self, footer: str) -> None:
        """Collapse the frame to *footer*, then erase that one line."""
        self._draw([footer])
        self._drawn = 0
        self.terminal.write(ERASE_PREV_LINE)

    def select(
        self,
        ctx: Context,
        label: str,
        items: Sequence[Any],
        predicate: SearchPredicate | None = None,
        template: RenderTemplate | None = None,
    ) -> int | None:
        """Let the user pick one of *items*.

        Returns:
            The index of the chosen item in *items*, or None when *items* is
            empty (nothing to choose; not a cancellation).

        Raises:
            CancelError: the user pressed Escape/Ctrl+C or *ctx* was cancelled.
            SelectorIOError: the terminal could not be read or written.
        """
        if not items:
            log.debug("select %r: no items", label)
            return None

        session = _Session(items, predicate, template, self.height_for(template))
        footer = f"[red]✗[/red] {escape(label)}"
        self._drawn = 0
        with self.terminal.session():
            try:
                while True:
                    self._draw(session.lines(label))
                    ctx.raise_if_cancelled()
                    chosen = session.handle(self.terminal.read_key(ctx))
                    if chosen is not None:
                        row = (template or _PLAIN_TEMPLATE).render("inactive", items[chosen])
                        footer = f"[green]✔[/green] {escape(label)}: {escape(' '.join(plain(row).split()))}"
                        log.debug("select %r -> %d", label, chosen)
                        return chosen
            finally:
                self._finish(footer)
