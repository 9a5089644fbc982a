from __future__ import annotations

import os
import sys
from contextlib import contextmanager

import pytest


def _ensure_project_root_on_path() -> None:
    # When running via the venv's pytest entrypoint, the CWD is not guaranteed to
    # be on sys.path. Ensure the repository root (containing `pgnav/`) is importable.
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_path()

from pgnav.errors import CancelError  # noqa: E402


class FakeTerminal:
    """Scripted terminal driver.

    ``keys`` are returned one per read; a callable entry is invoked with the
    context instead (e.g. to cancel it). Running out of keys acts like the
    user pressing Escape.
    """

    def __init__(self, keys=(), size=(80, 24)):
        self.keys = list(keys)
        self._size = size
        self.writes: list[str] = []
        self.sessions = 0

    def size(self):
        if isinstance(self._size, Exception):
            raise self._size
        return self._size

    def write(self, text: str) -> None:
        self.writes.append(text)

    @contextmanager
    def session(self):
        self.sessions += 1
        yield self

    def read_key(self, ctx):
        while True:
            ctx.raise_if_cancelled()
            if not self.keys:
                raise CancelError("no more keys")
            key = self.keys.pop(0)
            if callable(key):
                key(ctx)
                continue
            return key

    @property
    def output(self) -> str:
        return "".join(self.writes)


@pytest.fixture
def fake_terminal():
    return FakeTerminal
