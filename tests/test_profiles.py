"""Unit tests for connection profiles and the connection wizard."""
from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from pgnav.context import Context
from pgnav.errors import CancelError, ValidationError
from pgnav.profiles import (
    ConnectionProfile,
    ProfileStore,
    require,
    resolve_profile,
    validate_required,
)


def _answer(value):
    return lambda *args, **kwargs: SimpleNamespace(ask=lambda: value)


class _Selector:
    def __init__(self, answer):
        self.answer = answer
        self.labels = []

    def select(self, ctx, label, items, predicate=None, template=None):
        self.labels.append(label)
        return self.answer


def test_conninfo_only_includes_set_parameters():
    profile = ConnectionProfile(username="postgres", password="secret", db_name="app", ssl_mode="disable")
    info = profile.conninfo()
    assert "user=postgres" in info
    assert "password=secret" in info
    assert "dbname=app" in info
    assert "sslmode=disable" in info
    assert "port" not in info and "host" not in info


def test_conninfo_quotes_awkward_values():
    info = ConnectionProfile(password="it's a secret").conninfo()
    assert info.startswith("password='")


def test_profile_json_uses_stored_key_names():
    profile = ConnectionProfile.model_validate(
        {"config_name": "local", "dbName": "app", "sslMode": "require", "username": "u"}
    )
    assert (profile.name, profile.db_name, profile.ssl_mode) == ("local", "app", "require")
    dumped = profile.model_dump(by_alias=True)
    assert dumped["config_name"] == "local" and dumped["dbName"] == "app"


def test_store_creates_empty_file_on_first_load(tmp_path: Path):
    store = ProfileStore(tmp_path / "home")
    assert store.load() == []
    assert json.loads(store.path.read_text(encoding="utf-8")) == []


def test_store_ignores_unreadable_file(tmp_path: Path):
    store = ProfileStore(tmp_path)
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() == []
    store.path.write_text('{"config_name": 1}', encoding="utf-8")
    assert store.load() == []


def test_store_save_appends(tmp_path: Path):
    store = ProfileStore(tmp_path)
    store.save(ConnectionProfile(name="one", username="a"))
    store.save(ConnectionProfile(name="two", username="b"))
    assert [p.name for p in store.load()] == ["one", "two"]
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw[1]["config_name"] == "two"


def test_require_and_validator():
    assert require("x", "username") == "x"
    with pytest.raises(ValidationError, match="must provide a username"):
        require("  ", "username")
    validate = validate_required("database")
    assert validate("app") is True
    assert validate("") == "must provide a database"


def test_resolve_uses_saved_profile(tmp_path: Path, monkeypatch):
    store = ProfileStore(tmp_path)
    store.save(ConnectionProfile(name="local", username="a"))
    store.save(ConnectionProfile(name="staging", username="b"))
    monkeypatch.setattr("pgnav.profiles.questionary.confirm", _answer(True))
    selector = _Selector(answer=1)

    profile = resolve_profile(store, selector, Context())

    assert profile.name == "staging"
    assert selector.labels == ["Configs"]


def test_resolve_runs_wizard_without_saved_profiles(tmp_path: Path, monkeypatch):
    answers = iter(["postgres", "localhost", "app", "5432"])
    monkeypatch.setattr("pgnav.profiles.questionary.text", lambda *a, **k: SimpleNamespace(ask=lambda: next(answers)))
    monkeypatch.setattr("pgnav.profiles.questionary.password", _answer("secret"))
    monkeypatch.setattr("pgnav.profiles.questionary.select", _answer("require"))
    monkeypatch.setattr("pgnav.profiles.questionary.confirm", _answer(False))
    store = ProfileStore(tmp_path)

    profile = resolve_profile(store, _Selector(answer=None), Context())

    assert profile.username == "postgres"
    assert profile.password == "secret"
    assert profile.db_name == "app"
    assert profile.port == "5432"
    assert profile.ssl_mode == "require"
    assert store.load() == []


def test_wizard_saves_named_profile(tmp_path: Path, monkeypatch):
    answers = iter(["postgres", "db.internal", "app", "5433", "work"])
    monkeypatch.setattr("pgnav.profiles.questionary.text", lambda *a, **k: SimpleNamespace(ask=lambda: next(answers)))
    monkeypatch.setattr("pgnav.profiles.questionary.password", _answer("secret"))
    monkeypatch.setattr("pgnav.profiles.questionary.select", _answer("disable"))
    monkeypatch.setattr("pgnav.profiles.questionary.confirm", _answer(True))
    store = ProfileStore(tmp_path)

    profile = resolve_profile(store, _Selector(answer=None), Context())

    assert profile.name == "work"
    assert [p.host for p in store.load()] == ["db.internal"]


def test_aborted_prompt_is_a_cancel(tmp_path: Path, monkeypatch):
    monkeypatch.setattr("pgnav.profiles.questionary.text", _answer(None))
    with pytest.raises(CancelError):
        resolve_profile(ProfileStore(tmp_path), _Selector(answer=None), Context())
