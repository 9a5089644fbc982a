"""Console pieces printed around the selector: banner, header, errors."""
from __future__ import annotations

from typing import TYPE_CHECKING

import questionary
from rich.markup import escape
from rich.panel import Panel

if TYPE_CHECKING:
    from rich.console import Console

    from ..profiles import ConnectionProfile


# ═══════════════════════════════════════════════════════════════════════════════
# BRAND STYLING
# ═══════════════════════════════════════════════════════════════════════════════

BRAND_STYLE = questionary.Style([
    ("qmark", "fg:#00b4d8 bold"),         # Cyan accent
    ("question", "bold"),
    ("answer", "fg:#90e0ef bold"),         # Light cyan for answers
    ("highlighted", "fg:#00b4d8 bold"),    # Highlighted item
    ("pointer", "fg:#00b4d8 bold"),        # Arrow pointer
    ("selected", "fg:#90e0ef"),            # Selected item
])


# ═══════════════════════════════════════════════════════════════════════════════
# BANNER & HEADER
# ═══════════════════════════════════════════════════════════════════════════════

BANNER = """
[bold cyan]╔═══════════════════════════════════════════════════════════════╗
║           [white]pgnav[/white] - PostgreSQL catalog navigator                ║
╚═══════════════════════════════════════════════════════════════╝[/bold cyan]"""

KEYS_HINT = "[dim]type to filter · ↑/↓ move · Enter select · Esc/Ctrl+C quit[/dim]"


def render_welcome_banner(console: Console) -> None:
    console.print(BANNER)
    console.print(KEYS_HINT)
    console.print()


def render_header(console: Console, profile: ConnectionProfile) -> None:
    """Compact context bar naming the connection in use."""
    who = profile.username or "?"
    where = f"{profile.host or 'localhost'}:{profile.port or '5432'}"
    content = (
        f"  [bold]DB[/bold] [cyan]{profile.db_name or '?'}[/cyan]  "
        f"[bold]User[/bold] [cyan]{who}[/cyan]  "
        f"[bold]Server[/bold] [dim]{where}[/dim]"
    )
    if profile.name:
        content += f"  [bold]Profile[/bold] [dim]{profile.name}[/dim]"
    console.print(Panel.fit(content, border_style="dim"))
    console.print()


def render_error(
    console: Console,
    title: str,
    cause: str,
    action: str | None = None,
) -> None:
    """Render a friendly error panel with 3-part structure.

    Args:
        console: Rich Console for output
        title: Error title
        cause: What caused the error
        action: Suggested action to resolve
    """
    content = f"[bold red]✗ {title}[/bold red]\n\n"
    content += f"[yellow]Cause:[/yellow] {escape(cause)}\n"

    if action:
        content += f"\n[dim]→ {action}[/dim]"

    console.print(Panel.fit(content, border_style="red", title="Error"))
    console.print()
