# src/supa_todos/ui/view.py

from __future__ import annotations

"""
Presentation layer.

Two view states:
- UNAUTHENTICATED: credential form, sign-up / sign-in actions
- AUTHENTICATED:   task list + add form, add / toggle / remove / sign-out actions

The state only changes on session notifications from the SessionController.
`loading` is an overlay raised while a remote action is in flight, not a state.

Task actions take 1-based positions in the rendered list; the view maps them to ids.
"""

import contextlib
import logging
from collections.abc import AsyncIterator
from enum import StrEnum

from ..auth.session_controller import SessionController
from ..auth.session_models import AuthEvent, Session
from ..core.ports import Alert, Subscription
from ..tasks.task_models import Task
from ..tasks.task_store import TaskListStore

logger = logging.getLogger(__name__)

EMPTY_LIST_TEXT = "You have no tasks. Add one above!"

_STRIKE = "\u0336"


class ViewState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


def strike(text: str) -> str:
    """Strike-through via combining long stroke overlay (renders in most terminals)."""
    return "".join(ch + _STRIKE for ch in text)


class TaskListView:
    def __init__(
        self,
        controller: SessionController,
        store: TaskListStore,
        alert: Alert,
        *,
        title: str = "Supabase Todos",
    ) -> None:
        self._controller = controller
        self._store = store
        self._alert = alert
        self.title = title

        self.state = ViewState.UNAUTHENTICATED
        self.email: str | None = None
        self.loading = False
        self._sub: Subscription | None = None

    # ---- lifecycle ----

    async def mount(self) -> None:
        if self._sub is not None:
            return
        self._sub = self._controller.subscribe(self._on_session)
        await self._controller.initialize()
        # initialize() may have found an existing session before we were listening for it
        self._sync_from(self._controller.session)
        logger.debug("View mounted state=%s", self.state.value)

    async def unmount(self) -> None:
        if self._sub is not None:
            self._sub.unsubscribe()
            self._sub = None
        await self._controller.teardown()
        logger.debug("View unmounted")

    async def __aenter__(self) -> TaskListView:
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.unmount()

    def _on_session(self, event: AuthEvent, session: Session | None) -> None:
        before = self.state
        self._sync_from(session)
        if self.state != before:
            logger.debug("View %s -> %s on %s", before.value, self.state.value, event.value)

    def _sync_from(self, session: Session | None) -> None:
        if session is None:
            self.state = ViewState.UNAUTHENTICATED
            self.email = None
        else:
            self.state = ViewState.AUTHENTICATED
            self.email = session.email

    @contextlib.asynccontextmanager
    async def _busy(self) -> AsyncIterator[None]:
        self.loading = True
        try:
            yield
        finally:
            self.loading = False

    def _require(self, state: ViewState) -> bool:
        if self.state == state:
            return True
        if state == ViewState.AUTHENTICATED:
            self._alert("Sign in first.")
        else:
            self._alert("Already signed in. Sign out first.")
        return False

    def task_at(self, position: int) -> Task | None:
        tasks = self._store.tasks
        if 1 <= position <= len(tasks):
            return tasks[position - 1]
        return None

    def _task_or_alert(self, position: int) -> Task | None:
        task = self.task_at(position)
        if task is None:
            self._alert(f"No task #{position}.")
        return task

    # ---- Unauthenticated actions ----

    async def sign_up(self, email: str, password: str) -> bool:
        if not self._require(ViewState.UNAUTHENTICATED):
            return False
        async with self._busy():
            return await self._controller.sign_up(email, password)

    async def sign_in(self, email: str, password: str) -> bool:
        if not self._require(ViewState.UNAUTHENTICATED):
            return False
        async with self._busy():
            return await self._controller.sign_in(email, password)

    # ---- Authenticated actions ----

    async def sign_out(self) -> bool:
        if not self._require(ViewState.AUTHENTICATED):
            return False
        async with self._busy():
            return await self._controller.sign_out()

    async def add(self, text: str) -> Task | None:
        if not self._require(ViewState.AUTHENTICATED):
            return None
        async with self._busy():
            return await self._store.add(text)

    async def toggle(self, position: int) -> bool:
        if not self._require(ViewState.AUTHENTICATED):
            return False
        task = self._task_or_alert(position)
        if task is None:
            return False
        async with self._busy():
            return await self._store.toggle_complete(task.id, task.is_completed)

    async def remove(self, position: int) -> bool:
        if not self._require(ViewState.AUTHENTICATED):
            return False
        task = self._task_or_alert(position)
        if task is None:
            return False
        async with self._busy():
            return await self._store.remove(task.id)

    async def refresh(self) -> bool:
        if not self._require(ViewState.AUTHENTICATED):
            return False
        async with self._busy():
            return await self._store.refresh()

    # ---- rendering ----

    def render(self) -> str:
        if self.state == ViewState.UNAUTHENTICATED:
            return self._render_auth_form()
        return self._render_task_list()

    def _render_auth_form(self) -> str:
        lines = [
            f"== {self.title} ==",
            "Sign in or create an account",
            "  /signin <email> <password>",
            "  /signup <email> <password>",
        ]
        if self.loading:
            lines.append("Loading...")
        return "\n".join(lines)

    def _render_task_list(self) -> str:
        lines = [f"== {self.title} ==", f"Welcome, {self.email or 'anonymous'}"]
        if self.loading:
            lines.append("Loading...")

        tasks = self._store.tasks
        if not tasks:
            lines.append(EMPTY_LIST_TEXT)
            return "\n".join(lines)

        width = len(str(len(tasks)))
        for i, t in enumerate(tasks, start=1):
            mark = "[x]" if t.is_completed else "[ ]"
            text = strike(t.text) if t.is_completed else t.text
            lines.append(f"{i:>{width}}. {mark} {text}")
        return "\n".join(lines)
