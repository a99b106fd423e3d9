# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from supa_todos.auth.session_controller import SessionController
from supa_todos.cli.bootstrap import build_state
from supa_todos.core.state import AppState
from supa_todos.tasks.task_store import TaskListStore
from supa_todos.ui.view import TaskListView

from .fakes import RecordingBackend

ALICE = ("alice@example.com", "secret123")
BOB = ("bob@example.com", "hunter22")


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap/state.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Test Todos",
        log_level="WARNING",
        data_dir=tmp_path / "data",
        supabase_url=None,
        supabase_anon_key=None,
        tasks_table="tasks",
        offline_demo=True,
        offline_auto_confirm=True,
        has_supabase_credentials=False,
    )


@pytest.fixture()
def backend() -> RecordingBackend:
    b = RecordingBackend()
    b.create_user(*ALICE)
    b.create_user(*BOB)
    return b


@pytest.fixture()
def alerts() -> list[str]:
    return []


@pytest.fixture()
def store(backend: RecordingBackend, alerts: list[str]) -> TaskListStore:
    return TaskListStore(backend, alerts.append)


@pytest.fixture()
def controller(backend: RecordingBackend, store: TaskListStore, alerts: list[str]) -> SessionController:
    return SessionController(backend, store, alerts.append)


@pytest.fixture()
def view(controller: SessionController, store: TaskListStore, alerts: list[str]) -> TaskListView:
    return TaskListView(controller, store, alerts.append, title="Test Todos")


@pytest.fixture()
def state(settings: SimpleNamespace, backend: RecordingBackend) -> AppState:
    """AppState wired exactly like the real app, around the recording backend."""
    return build_state(settings, backend)
