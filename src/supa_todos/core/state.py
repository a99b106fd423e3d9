# src/supa_todos/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..auth.session_controller import SessionController
from ..tasks.task_store import TaskListStore
from ..ui.view import TaskListView
from .ports import RemoteBackend


@dataclass
class AppState:
    """
    Everything the running app holds, wired once by cli/bootstrap.py.

    `alerts` collects user-visible messages raised by the controller/store/view;
    the console connector drains and prints them after every action.
    """

    settings: object
    backend: RemoteBackend
    store: TaskListStore
    controller: SessionController
    view: TaskListView

    alerts: list[str] = field(default_factory=list)

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def drain_alerts(self) -> list[str]:
        out = list(self.alerts)
        self.alerts.clear()
        return out
