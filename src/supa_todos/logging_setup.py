# src/supa_todos/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_NOISY_PREFIXES = (
    "httpx",
    "httpcore",
    "hpack",
    "h2",
    "supabase",
    "supabase_auth",
    "gotrue",
    "postgrest",
    "realtime",
    "storage3",
)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Make interactive console usable:
    - allow supa_todos logs
    - suppress HTTP / Supabase client chatter unless ERROR+
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("supa_todos."):
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        if name.startswith(_NOISY_PREFIXES):
            return record.levelno >= logging.ERROR

        # Any other 3rd party: only errors to console.
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/todos",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure logging with:
    - Console handler: filtered, quiet by default (the console is the UI)
    - File handler: full logs for debugging

    Call this ONCE, very early (before first logger.info). Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "todos.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)

    # Request lines from httpx are useful in the file, not per-request headers.
    logging.getLogger("httpcore").setLevel(logging.INFO)
    logging.getLogger("hpack").setLevel(logging.WARNING)

    return log_file
