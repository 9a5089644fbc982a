from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _resolve_log_dir(settings: object) -> Path:
    """Resolve the log directory (PGNAV_LOG_DIR, else PGNAV_HOME/logs)."""

    raw = getattr(settings, "PGNAV_LOG_DIR", None)
    if raw is not None:
        return raw if isinstance(raw, Path) else Path(str(raw))
    home = getattr(settings, "PGNAV_HOME", Path.home() / ".pgnav")
    return Path(home) / "logs"


def setup_logging(settings: object, debug: bool = False) -> Path:
    """Configure logging to a rotating diagnostic file.

    Returns the resolved log file path.

    Rotation:
      - Daily rotation at midnight.
      - Keep the last `PGNAV_LOG_BACKUP_COUNT` rotated files.

    Notes:
      - The terminal belongs to the selector, so nothing is logged to it
        unless `debug` is set; then errors also go to stderr.
      - This function is safe to call multiple times (it resets handlers).
    """

    log_dir = _resolve_log_dir(settings)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "pgnav.log"

    level_name = str(getattr(settings, "PGNAV_LOG_LEVEL", "INFO") or "INFO").upper().strip()
    level = getattr(logging, level_name, logging.INFO)
    if debug:
        level = logging.DEBUG

    file_handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when="midnight",
        interval=1,
        backupCount=max(0, int(getattr(settings, "PGNAV_LOG_BACKUP_COUNT", 7) or 0)),
        encoding="utf-8",
        utc=False,
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(_FORMAT))

    # Reset root handlers so we don't duplicate logs on repeated starts.
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)
    root.addHandler(file_handler)

    if debug:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.ERROR)
        stderr_handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(stderr_handler)

    # psycopg is chatty at DEBUG.
    logging.getLogger("psycopg").setLevel(max(level, logging.INFO))

    logging.getLogger("pgnav").info(
        "pgnav logging enabled (file=%s, level=%s, debug=%s)",
        os.fspath(log_file),
        logging.getLevelName(level),
        debug,
    )

    return log_file
