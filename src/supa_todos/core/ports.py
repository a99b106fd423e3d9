# src/supa_todos/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The controller, store and view depend on Protocols instead of the Supabase client.
This keeps the backend swappable (Supabase / offline demo) and makes testing easier.

Every remote call is async. Failures are raised as AuthServiceError / DataServiceError
(see core/errors.py) carrying the service message verbatim.
"""

from collections.abc import Callable
from typing import Protocol

from ..auth.session_models import AuthEvent, Session
from ..tasks.task_models import Task, TaskId

SessionCallback = Callable[[AuthEvent, Session | None], None]

Alert = Callable[[str], None]
# Blocking user-visible message (the console prints it, tests collect it).


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class AuthClient(Protocol):
    """Session management offered by the remote service."""

    async def get_session(self) -> Session | None: ...

    def on_session_change(self, callback: SessionCallback) -> Subscription: ...

    async def sign_up(self, email: str, password: str) -> Session | None:
        """Returns the new session if the service confirmed the user immediately."""
        ...

    async def sign_in(self, email: str, password: str) -> Session: ...

    async def sign_out(self) -> None: ...


class TaskTable(Protocol):
    """
    Operations on the `tasks` table.

    The owner column is defaulted server-side to the signed-in user; callers never send it.
    """

    async def select_all(self) -> list[Task]:
        """All rows visible to the current session, newest first (created_at desc)."""
        ...

    async def insert(self, text: str) -> Task:
        """Insert {text}; returns the persisted row with server-assigned fields."""
        ...

    async def update_completed(self, task_id: TaskId, is_completed: bool) -> Task:
        """Blind update of is_completed where id = task_id. No matching row is an error."""
        ...

    async def delete(self, task_id: TaskId) -> None:
        """Delete where id = task_id. No matching row is an error."""
        ...


class RemoteBackend(AuthClient, TaskTable, Protocol):
    """Both halves of the remote service, plus a name for status output."""

    name: str

    async def close(self) -> None: ...
