# src/supa_todos/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Iterator

from ..core.errors import RemoteServiceError, friendly_error_message
from ..core.ports import Alert, TaskTable
from .task_models import Task, TaskId

logger = logging.getLogger(__name__)


class TaskListStore:
    """
    Local mirror of the remote `tasks` table for the current session.

    The remote table is the source of truth. After each successful mutating call the
    local list is patched to agree with the single affected row:
    - insert  -> prepend the returned row (server-assigned id / created_at)
    - update  -> flip is_completed for the matching id
    - delete  -> drop the matching id

    A full refetch only happens through refresh().

    On any remote failure the message is passed to `alert` and the local list is left
    untouched. Nothing is retried.
    """

    def __init__(self, table: TaskTable, alert: Alert) -> None:
        self._table = table
        self._alert = alert
        self._tasks: list[Task] = []

    # ---- read side ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def get(self, task_id: TaskId) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(tuple(self._tasks))

    # ---- remote-backed operations ----

    async def refresh(self) -> bool:
        try:
            rows = await self._table.select_all()
        except RemoteServiceError as e:
            self._fail("refresh", e)
            return False

        self._tasks = sorted(rows, key=lambda t: t.created_at, reverse=True)
        logger.debug("Task list refreshed: %d rows", len(self._tasks))
        return True

    async def add(self, text: str) -> Task | None:
        text = (text or "").strip()
        if not text:
            return None

        try:
            task = await self._table.insert(text)
        except RemoteServiceError as e:
            self._fail("insert", e)
            return None

        self._tasks.insert(0, task)
        logger.debug("Task added id=%s", task.id)
        return task

    async def toggle_complete(self, task_id: TaskId, current: bool) -> bool:
        new_flag = not current
        try:
            await self._table.update_completed(task_id, new_flag)
        except RemoteServiceError as e:
            self._fail("update", e)
            return False

        # Patch the local copy by id; the response row is not re-read (blind update).
        for t in self._tasks:
            if t.id == task_id:
                t.is_completed = new_flag
                break
        logger.debug("Task toggled id=%s is_completed=%s", task_id, new_flag)
        return True

    async def remove(self, task_id: TaskId) -> bool:
        try:
            await self._table.delete(task_id)
        except RemoteServiceError as e:
            self._fail("delete", e)
            return False

        self._tasks = [t for t in self._tasks if t.id != task_id]
        logger.debug("Task removed id=%s", task_id)
        return True

    def clear(self) -> None:
        """Drop the local mirror (no remote call). Used when the session goes away."""
        if self._tasks:
            logger.debug("Clearing %d cached tasks", len(self._tasks))
        self._tasks = []

    # ---- helpers ----

    def _fail(self, op: str, exc: RemoteServiceError) -> None:
        msg = friendly_error_message(exc)
        logger.info("Task %s failed: %s", op, msg)
        self._alert(msg)
