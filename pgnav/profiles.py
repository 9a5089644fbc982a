"""Saved connection profiles and the first-run connection wizard.

Profiles are kept as a JSON list in PGNAV_HOME/config.json. When none are
saved (or the user declines them) a short questionary wizard collects the
connection parameters and optionally saves them under a name.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import pydantic
import questionary
from psycopg.conninfo import make_conninfo
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import CancelError, ValidationError
from .tui.components import BRAND_STYLE
from .tui.search import field_predicate
from .tui.template import RenderTemplate

if TYPE_CHECKING:
    from .context import Context
    from .tui.selector import Selector

log = logging.getLogger(__name__)

SSL_MODES = ["disable", "require", "verify-ca", "verify-full"]

PROFILE_TEMPLATE = RenderTemplate(
    label="{label}?",
    active="» {name:cyan} : {username:green} : {db_name:green} : {ssl_mode:green}",
    inactive="  {name:cyan} : {username:green} : {db_name:green} : {ssl_mode:green}",
    details=(
        "\n ------------ Config ------------"
        "\n [dim]Name:[/dim]           {name}"
        "\n [dim]Username:[/dim]       {username}"
        "\n [dim]Host:[/dim]           {host}"
        "\n [dim]Database Name:[/dim]  {db_name}"
        "\n [dim]SSL Mode:[/dim]       {ssl_mode}"
    ),
)


class ConnectionProfile(BaseModel):
    """One saved PostgreSQL connection."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", alias="config_name")
    username: str = ""
    password: str = ""
    host: str = ""
    port: str = ""
    db_name: str = Field(default="", alias="dbName")
    ssl_mode: str = Field(default="", alias="sslMode")

    def conninfo(self) -> str:
        """libpq connection string with only the parameters that are set."""
        params = {
            "user": self.username,
            "password": self.password,
            "host": self.host,
            "dbname": self.db_name,
            "port": self.port,
            "sslmode": self.ssl_mode,
        }
        return make_conninfo("", **{k: v for k, v in params.items() if v})


_profiles_adapter = TypeAdapter(list[ConnectionProfile])


class ProfileStore:
    """JSON-file backed list of connection profiles."""

    def __init__(self, home: Path):
        self.home = Path(home)
        self.path = self.home / "config.json"

    def load(self) -> list[ConnectionProfile]:
        """Read saved profiles, creating an empty store on first use.

        A file that cannot be decoded is treated as holding no profiles.
        """
        self.home.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("[]\n", encoding="utf-8")
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            return _profiles_adapter.validate_python(raw)
        except (json.JSONDecodeError, pydantic.ValidationError) as e:
            log.warning("ignoring unreadable profile store %s: %s", self.path, e)
            return []

    def save(self, profile: ConnectionProfile) -> None:
        profiles = self.load()
        profiles.append(profile)
        payload = [p.model_dump(by_alias=True) for p in profiles]
        self.path.write_text(json.dumps(payload, indent="\t") + "\n", encoding="utf-8")
        log.info("saved profile %r to %s", profile.name, self.path)


def require(value: str | None, label: str) -> str:
    """Return *value*, raising ValidationError when it is empty."""
    if value is None or not str(value).strip():
        raise ValidationError(f"must provide a {label}")
    return str(value)


def validate_required(label: str) -> Callable[[str], Any]:
    """questionary validator: True, or the error message for empty input."""

    def validate(text: str) -> Any:
        try:
            require(text, label)
        except ValidationError as e:
            return str(e)
        return True

    return validate


def _ask(question: Any) -> Any:
    answer = question.ask()
    if answer is None:
        raise CancelError("prompt aborted")
    return answer


def prompt_profile(store: ProfileStore) -> ConnectionProfile:
    """Ask for connection parameters; optionally save them."""
    profile = ConnectionProfile(
        username=require(_ask(questionary.text(
            "Username", default="postgres",
            validate=validate_required("username"), style=BRAND_STYLE,
        )), "username"),
        password=require(_ask(questionary.password(
            "Password", default="postgres",
            validate=validate_required("password"), style=BRAND_STYLE,
        )), "password"),
        host=_ask(questionary.text("Host", default="localhost", style=BRAND_STYLE)),
        db_name=require(_ask(questionary.text(
            "Database", default="postgres",
            validate=validate_required("database"), style=BRAND_STYLE,
        )), "database"),
        port=require(_ask(questionary.text(
            "Port", default="5432",
            validate=validate_required("port"), style=BRAND_STYLE,
        )), "port"),
        ssl_mode=_ask(questionary.select("SSL Mode", choices=SSL_MODES, style=BRAND_STYLE)),
    )

    if not _ask(questionary.confirm("Save configuration", default=False, style=BRAND_STYLE)):
        return profile

    profile.name = require(_ask(questionary.text(
        "Config Name", validate=validate_required("filename"), style=BRAND_STYLE,
    )), "filename")
    try:
        store.save(profile)
    except OSError as e:
        log.warning("could not save profile %r: %s", profile.name, e)
        questionary.print(f"Could not save configuration: {e}", style="fg:yellow")
    return profile


def resolve_profile(store: ProfileStore, selector: Selector, ctx: Context) -> ConnectionProfile:
    """Pick a saved profile, or fall back to the wizard.

    Raises:
        CancelError: the user aborted a prompt or the selector.
    """
    profiles = store.load()
    if profiles and _ask(questionary.confirm("Use previous config", default=True, style=BRAND_STYLE)):
        index = selector.select(ctx, "Configs", profiles, field_predicate("name"), PROFILE_TEMPLATE)
        if index is not None:
            return profiles[index]
    return prompt_profile(store)
