# src/supa_todos/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app, read once at startup.
- No secrets required at import time (offline demo mode works without any).
- Plain SUPABASE_* names are accepted as fallbacks for the prefixed ones.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODOS"


class ConfigError(RuntimeError):
    """Raised at startup when the configuration cannot be used."""


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Supabase ----
    supabase_url: str | None
    supabase_anon_key: str | None
    tasks_table: str

    # ---- Offline demo backend ----
    offline_demo: bool
    offline_auto_confirm: bool

    @property
    def has_supabase_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Supabase Todos").strip() or "Supabase Todos"
        log_level = _env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING"
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todos"))

        supabase_url = _first_env(_k("SUPABASE_URL"), "SUPABASE_URL", default=None)
        supabase_anon_key = _first_env(_k("SUPABASE_ANON_KEY"), "SUPABASE_ANON_KEY", default=None)
        tasks_table = _env(_k("TABLE"), "tasks").strip() or "tasks"

        offline_demo = _env_bool(_k("OFFLINE_DEMO"), True)
        offline_auto_confirm = _env_bool(_k("OFFLINE_AUTO_CONFIRM"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            supabase_url=supabase_url.strip() if supabase_url else None,
            supabase_anon_key=supabase_anon_key.strip() if supabase_anon_key else None,
            tasks_table=tasks_table,
            offline_demo=offline_demo,
            offline_auto_confirm=offline_auto_confirm,
        )


def load_settings(*, dotenv: bool = True) -> Settings:
    """
    Read settings once at startup.

    A local .env is loaded first (never overriding real environment variables).
    """
    if dotenv:
        load_dotenv(override=False)
    return Settings.from_env()
