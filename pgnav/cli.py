from __future__ import annotations

import logging

import psycopg
import typer
from rich.console import Console

from .catalog import build_tree
from .context import Context, install_signal_relay
from .errors import CancelError, PgnavError, ProfileError, SelectorIOError, ValidationError
from .logging import setup_logging
from .profiles import ConnectionProfile, ProfileStore, resolve_profile
from .providers.postgres import PostgresClient
from .settings import Settings, load_settings
from .tui.components import render_error, render_header, render_welcome_banner
from .tui.navigator import Navigator
from .tui.router import Router
from .tui.selector import Selector
from .tui.terminal import PosixTerminal

log = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="pgnav: fuzzy-searchable terminal navigator for a PostgreSQL catalog",
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)


def open_connection(
    settings: Settings, selector: Selector, ctx: Context
) -> tuple[ConnectionProfile, psycopg.Connection]:
    """Resolve a profile and connect with it.

    Raises:
        CancelError: the user aborted profile selection.
        ProfileError: no usable profile, or the connection failed.
    """
    store = ProfileStore(settings.PGNAV_HOME)
    try:
        profile = resolve_profile(store, selector, ctx)
    except (ValidationError, SelectorIOError, OSError) as e:
        raise ProfileError(str(e)) from e

    try:
        conn = psycopg.connect(
            profile.conninfo(),
            autocommit=True,
            connect_timeout=settings.PGNAV_CONNECT_TIMEOUT,
        )
    except psycopg.Error as e:
        raise ProfileError(f"could not connect: {e}") from e
    log.info("connected (profile=%r, db=%r)", profile.name, profile.db_name)
    return profile, conn


def navigate(
    settings: Settings,
    conn: psycopg.Connection,
    selector: Selector,
    ctx: Context,
) -> None:
    """Build the tree over *conn* and run the navigator until it raises."""
    tree = build_tree(PostgresClient(conn, timeout=settings.PGNAV_QUERY_TIMEOUT))
    nav = Navigator(Router(selector), tree, bounce=settings.PGNAV_BOUNCE)
    try:
        nav.run(ctx)
    finally:
        log.info("visited: %s", " > ".join(nav.history))


@app.command()
def run(
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Surface internal errors on stderr",
    ),
) -> None:
    """
    [bold]pgnav[/bold]: drill through schemas, tables, views and stats.

    [dim]Type to filter any list; Enter selects; Esc or Ctrl+C quits.[/dim]
    """
    settings = load_settings()
    debug = debug or settings.PGNAV_DEBUG
    setup_logging(settings, debug)

    ctx = Context()
    restore_signals = install_signal_relay(ctx)
    selector = Selector(PosixTerminal(poll_interval=settings.PGNAV_POLL_INTERVAL))
    try:
        try:
            profile, conn = open_connection(settings, selector, ctx)
        except CancelError:
            raise typer.Exit(code=0)
        except ProfileError as e:
            log.error("startup failed: %s", e)
            render_error(
                err_console,
                "No usable connection",
                str(e),
                f"Check {settings.PGNAV_HOME / 'config.json'} or enter new parameters",
            )
            raise typer.Exit(code=1)

        with conn:
            render_welcome_banner(console)
            render_header(console, profile)
            try:
                navigate(settings, conn, selector, ctx)
            except CancelError:
                log.info("session ended by user")
            except PgnavError as e:
                # Surfaced on stderr by the debug log handler only.
                log.error("navigation stopped: %s", e, exc_info=debug)
                raise typer.Exit(code=1)
    finally:
        restore_signals()


def main() -> None:
    app()
