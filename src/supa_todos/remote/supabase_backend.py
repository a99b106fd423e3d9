# src/supa_todos/remote/supabase_backend.py

"""
Supabase adapter.

The only module that talks to the Supabase client. It converts:
- supabase auth sessions      -> auth.session_models.Session
- PostgREST rows              -> tasks.task_models.Task
- AuthError / PostgrestAPIError / httpx errors -> AuthServiceError / DataServiceError

The async client keeps its own session and attaches the user's JWT to table requests,
so row ownership is enforced by the table's row-level-security policies (see schema.sql).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from supabase import AsyncClient, AuthError, PostgrestAPIError, acreate_client

from ..auth.session_models import AuthEvent, Session
from ..config import ConfigError, Settings
from ..core.errors import AuthServiceError, DataServiceError, friendly_error_message
from ..core.ports import SessionCallback, Subscription
from ..tasks.task_models import Task, TaskId

logger = logging.getLogger(__name__)


def session_from_supabase(raw: Any) -> Session | None:
    """Convert a supabase Session (or None) into our Session."""
    if raw is None:
        return None
    user = getattr(raw, "user", None)
    if user is None:
        return None
    return Session(
        user_id=str(user.id),
        email=getattr(user, "email", None),
        access_token=getattr(raw, "access_token", "") or "",
        refresh_token=getattr(raw, "refresh_token", "") or "",
        expires_at=getattr(raw, "expires_at", None),
    )


def _status_of(exc: BaseException) -> int | str | None:
    for attr in ("status", "code"):
        val = getattr(exc, attr, None)
        if isinstance(val, (int, str)) and val != "":
            return val
    return None


class SupabaseBackend:
    """Auth + `tasks` table operations over supabase.AsyncClient."""

    name = "supabase"

    def __init__(self, client: AsyncClient, *, table: str = "tasks") -> None:
        self._client = client
        self._table_name = table

    @classmethod
    async def create(cls, settings: Settings) -> SupabaseBackend:
        if not settings.has_supabase_credentials:
            raise ConfigError("Supabase URL and anon key must be set (TODOS_SUPABASE_URL / TODOS_SUPABASE_ANON_KEY).")
        try:
            client = await acreate_client(settings.supabase_url, settings.supabase_anon_key)
        except Exception as e:
            # create_client validates URL and key format before any network call
            raise ConfigError(f"Cannot create Supabase client: {e}") from e
        logger.info("Supabase client initialized url=%s table=%s", settings.supabase_url, settings.tasks_table)
        return cls(client, table=settings.tasks_table)

    def _table(self):
        return self._client.table(self._table_name)

    # ---- AuthClient ----

    async def get_session(self) -> Session | None:
        try:
            raw = await self._client.auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(friendly_error_message(e), status=_status_of(e)) from e
        return session_from_supabase(raw)

    def on_session_change(self, callback: SessionCallback) -> Subscription:
        def _relay(event: Any, raw_session: Any) -> None:
            callback(AuthEvent.parse(event), session_from_supabase(raw_session))

        return self._client.auth.on_auth_state_change(_relay)

    async def sign_up(self, email: str, password: str) -> Session | None:
        try:
            resp = await self._client.auth.sign_up({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(friendly_error_message(e), status=_status_of(e)) from e

        if getattr(resp, "user", None) is None:
            raise AuthServiceError("Failed to create account")
        return session_from_supabase(getattr(resp, "session", None))

    async def sign_in(self, email: str, password: str) -> Session:
        try:
            resp = await self._client.auth.sign_in_with_password({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(friendly_error_message(e), status=_status_of(e)) from e

        session = session_from_supabase(getattr(resp, "session", None))
        if session is None:
            raise AuthServiceError("Invalid login credentials")
        return session

    async def sign_out(self) -> None:
        try:
            await self._client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            raise AuthServiceError(friendly_error_message(e), status=_status_of(e)) from e

    # ---- TaskTable ----

    async def select_all(self) -> list[Task]:
        try:
            resp = await self._table().select("*").order("created_at", desc=True).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise DataServiceError(friendly_error_message(e), status=_status_of(e)) from e
        return [Task.from_row(row) for row in (resp.data or [])]

    async def insert(self, text: str) -> Task:
        try:
            resp = await self._table().insert({"text": text}).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise DataServiceError(friendly_error_message(e), status=_status_of(e)) from e

        rows = resp.data or []
        if not rows:
            raise DataServiceError("Insert returned no row")
        return Task.from_row(rows[0])

    async def update_completed(self, task_id: TaskId, is_completed: bool) -> Task:
        try:
            resp = await (
                self._table().update({"is_completed": bool(is_completed)}).eq("id", task_id).execute()
            )
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise DataServiceError(friendly_error_message(e), status=_status_of(e)) from e

        rows = resp.data or []
        if not rows:
            # Either the row is gone or RLS hides it from this user.
            raise DataServiceError(f"No task with id {task_id}", status=404)
        return Task.from_row(rows[0])

    async def delete(self, task_id: TaskId) -> None:
        try:
            resp = await self._table().delete().eq("id", task_id).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise DataServiceError(friendly_error_message(e), status=_status_of(e)) from e

        if not (resp.data or []):
            raise DataServiceError(f"No task with id {task_id}", status=404)

    async def close(self) -> None:
        # AsyncClient has no explicit close; dropping auth listeners is enough here.
        logger.debug("Supabase backend closed")
