"""Render templates bound against arbitrary items.

A template is four format strings. Placeholders look like ``{field}`` or
``{field:style}`` where *style* is a rich style (``{name:bold cyan}``);
literal text may carry rich markup (``[dim]Owner:[/dim]``). Fields are
looked up dynamically so menu entries, schema rows and stat rows all go
through the same selector. Unknown fields render as the empty string.
"""
from __future__ import annotations

import dataclasses
import string
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.text import Text

_SLOTS = ("label", "active", "inactive", "details")


def bind_fields(item: Any) -> dict[str, Any]:
    """Collect the displayable fields of *item*.

    Mappings contribute their keys, dataclasses their fields, other objects
    their public attributes. The item itself is always available as ``item``.
    """
    fields: dict[str, Any] = {}
    if isinstance(item, Mapping):
        fields.update(item)
    elif dataclasses.is_dataclass(item) and not isinstance(item, type):
        for f in dataclasses.fields(item):
            fields[f.name] = getattr(item, f.name)
    elif hasattr(item, "_asdict"):
        fields.update(item._asdict())
    elif hasattr(item, "__dict__"):
        fields.update({k: v for k, v in vars(item).items() if not k.startswith("_")})
    fields.setdefault("item", item)
    return fields


def display_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class _MarkupFormatter(string.Formatter):
    """``str.format`` that tolerates missing fields and styles via rich.

    With ``single_line`` set, runs of whitespace in substituted values
    (a view definition's newlines included) collapse to one space.
    """

    def __init__(self, single_line: bool = False):
        super().__init__()
        self.single_line = single_line

    def get_field(self, field_name, args, kwargs):
        head, *rest = field_name.split(".")
        value: Any = kwargs.get(head)
        for attr in rest:
            if value is None:
                break
            if isinstance(value, Mapping):
                value = value.get(attr)
            else:
                value = getattr(value, attr, None)
        return value, head

    def format_field(self, value, format_spec):
        text = display_value(value)
        if self.single_line:
            text = " ".join(text.split())
        text = escape(text)
        if format_spec and text:
            return f"[{format_spec}]{text}[/]"
        return text


_formatter = _MarkupFormatter()
_line_formatter = _MarkupFormatter(single_line=True)


@dataclass(frozen=True)
class RenderTemplate:
    """Formatting configuration for one selector session."""

    label: str = "{label}"
    active: str = "» {item:bold cyan}"
    inactive: str = "  {item:cyan}"
    details: str = ""

    @property
    def detail_lines(self) -> int:
        """Viewport rows consumed by the detail block."""
        return self.details.count("\n")

    def render(self, which: str, item: Any) -> str:
        """Substitute *item* into the ``which`` template, returning rich markup.

        Every slot but ``details`` renders to exactly one line.
        """
        if which not in _SLOTS:
            raise ValueError(f"unknown template slot: {which!r}")
        fmt = getattr(self, which)
        if not fmt:
            return ""
        formatter = _formatter if which == "details" else _line_formatter
        return formatter.vformat(fmt, (), bind_fields(item))

    def render_label(self, label: str) -> str:
        return self.render("label", {"label": label})

    def render_details(self, item: Any) -> list[str]:
        """Detail block as individual markup lines (the leading newline dropped)."""
        if not self.details:
            return []
        rendered = self.render("details", item)
        lines = rendered.split("\n")
        return lines[1:] if self.details.startswith("\n") else lines


# Menus list child states by name.
MENU_TEMPLATE = RenderTemplate(
    label="{label}",
    active="» {name:bold cyan}",
    inactive="  {name:cyan}",
)


def plain(markup: str) -> str:
    """Strip markup, leaving the text a user would read."""
    return Text.from_markup(markup).plain


def to_ansi(markup: str, console: Console, width: int | None = None) -> str:
    """Render one line of markup to a terminal string, cropped to *width*."""
    text = Text.from_markup(markup)
    text.expand_tabs(4)
    if width is not None and width > 0:
        text.truncate(width, overflow="ellipsis")
    with console.capture() as capture:
        console.print(text, end="", soft_wrap=True, highlight=False)
    return capture.get()
