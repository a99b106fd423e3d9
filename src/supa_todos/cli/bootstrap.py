# src/supa_todos/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- takes the settings loaded once at startup,
- ensures the local (gitignored) data directory exists,
- picks the remote backend (Supabase, or the offline demo backend),
- wires store / session controller / view into AppState.
"""

from __future__ import annotations

import logging

from ..auth.session_controller import SessionController
from ..config import ConfigError, Settings
from ..core.ports import RemoteBackend
from ..core.state import AppState
from ..remote.memory_backend import InMemoryBackend
from ..remote.supabase_backend import SupabaseBackend
from ..tasks.task_store import TaskListStore
from ..ui.view import TaskListView

logger = logging.getLogger(__name__)


async def create_backend(settings: Settings) -> RemoteBackend:
    if settings.has_supabase_credentials:
        return await SupabaseBackend.create(settings)

    if not settings.offline_demo:
        raise ConfigError(
            "No Supabase credentials configured. Set TODOS_SUPABASE_URL and "
            "TODOS_SUPABASE_ANON_KEY (or enable TODOS_OFFLINE_DEMO)."
        )

    logger.warning("No Supabase credentials; using the offline demo backend (data is not saved).")
    return InMemoryBackend(auto_confirm=settings.offline_auto_confirm)


def build_state(settings: Settings, backend: RemoteBackend) -> AppState:
    """Wire AppState around an already constructed backend (tests pass fakes here)."""
    alerts: list[str] = []
    store = TaskListStore(backend, alerts.append)
    controller = SessionController(backend, store, alerts.append)
    view = TaskListView(controller, store, alerts.append, title=settings.app_name)
    return AppState(
        settings=settings,
        backend=backend,
        store=store,
        controller=controller,
        view=view,
        alerts=alerts,
    )


async def create_initial_state(settings: Settings) -> AppState:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    backend = await create_backend(settings)
    return build_state(settings, backend)


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown: unmount the view, then close the backend."""
    try:
        await state.view.unmount()
    except Exception:
        logger.exception("View unmount failed.")

    try:
        await state.backend.close()
    except Exception:
        logger.debug("Backend close failed.", exc_info=True)
