"""CLI exit-code behaviour with the connection and navigator stubbed out."""
from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

import pgnav.cli as cli
from pgnav.errors import CancelError, ProfileError, ProviderError
from pgnav.profiles import ConnectionProfile
from pgnav.settings import Settings

runner = CliRunner()


class _Conn:
    closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True
        return False


@pytest.fixture
def stubbed(monkeypatch, tmp_path: Path):
    settings = Settings(PGNAV_HOME=tmp_path, PGNAV_LOG_DIR=tmp_path / "logs")
    monkeypatch.setattr(cli, "load_settings", lambda: settings)
    monkeypatch.setattr(cli, "install_signal_relay", lambda ctx: (lambda: None))
    conn = _Conn()
    monkeypatch.setattr(
        cli, "open_connection", lambda s, sel, ctx: (ConnectionProfile(name="t", db_name="app"), conn)
    )
    return conn


def _navigate_raising(exc):
    def navigate(settings, conn, selector, ctx):
        raise exc

    return navigate


def test_user_quit_exits_cleanly(stubbed, monkeypatch):
    monkeypatch.setattr(cli, "navigate", _navigate_raising(CancelError()))
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 0
    assert stubbed.closed


def test_provider_failure_exits_nonzero(stubbed, monkeypatch):
    monkeypatch.setattr(cli, "navigate", _navigate_raising(ProviderError("boom")))
    result = runner.invoke(cli.app, ["--debug"])
    assert result.exit_code == 1
    assert stubbed.closed


def test_startup_failure_exits_one(stubbed, monkeypatch):
    def no_profile(settings, selector, ctx):
        raise ProfileError("could not connect: refused")

    monkeypatch.setattr(cli, "open_connection", no_profile)
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 1


def test_cancelled_profile_prompt_exits_cleanly(stubbed, monkeypatch):
    def aborted(settings, selector, ctx):
        raise CancelError()

    monkeypatch.setattr(cli, "open_connection", aborted)
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 0


def test_open_connection_wraps_driver_errors(monkeypatch, tmp_path: Path):
    import psycopg

    monkeypatch.setattr(cli, "resolve_profile", lambda store, selector, ctx: ConnectionProfile(username="u"))

    def refuse(*args, **kwargs):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(cli.psycopg, "connect", refuse)
    with pytest.raises(ProfileError, match="could not connect"):
        cli.open_connection(Settings(PGNAV_HOME=tmp_path), selector=None, ctx=None)
