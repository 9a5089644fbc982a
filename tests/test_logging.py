from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

from pgnav.logging import setup_logging


def _settings(tmp_path: Path, **kw):
    base = dict(PGNAV_LOG_DIR=tmp_path / "logs", PGNAV_LOG_LEVEL="INFO", PGNAV_LOG_BACKUP_COUNT=3)
    base.update(kw)
    return SimpleNamespace(**base)


def test_setup_logging_writes_to_rotating_file(tmp_path: Path):
    log_file = setup_logging(_settings(tmp_path))
    logging.getLogger("pgnav.test").info("hello")
    for h in logging.getLogger().handlers:
        h.flush()
    assert log_file == tmp_path / "logs" / "pgnav.log"
    assert "hello" in log_file.read_text(encoding="utf-8")


def test_stderr_only_in_debug(tmp_path: Path):
    setup_logging(_settings(tmp_path))
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.INFO

    setup_logging(_settings(tmp_path), debug=True)
    assert len(root.handlers) == 2
    assert root.level == logging.DEBUG


def test_log_dir_defaults_under_home(tmp_path: Path):
    log_file = setup_logging(SimpleNamespace(PGNAV_LOG_DIR=None, PGNAV_HOME=tmp_path))
    assert log_file == tmp_path / "logs" / "pgnav.log"
