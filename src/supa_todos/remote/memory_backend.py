# src/supa_todos/remote/memory_backend.py

from __future__ import annotations

import asyncio
import itertools
import logging
import secrets
import time
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from ..auth.session_models import AuthEvent, Session
from ..core.errors import AuthServiceError, DataServiceError
from ..core.ports import SessionCallback
from ..tasks.task_models import Task, TaskId

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
SESSION_TTL_SECONDS = 3600


@dataclass(slots=True)
class _User:
    id: str
    email: str
    password: str
    confirmed: bool


class _Subscription:
    def __init__(self, backend: InMemoryBackend, sub_id: int) -> None:
        self._backend = backend
        self._sub_id = sub_id

    def unsubscribe(self) -> None:
        self._backend._subscribers.pop(self._sub_id, None)


class InMemoryBackend:
    """
    Offline stand-in for the hosted auth + tasks table, used for demos when no
    Supabase project is configured.

    Behaviour mirrors the hosted service where the app can observe it:
    - sign-up / sign-in / sign-out with the service's error messages
    - session-change notifications delivered synchronously from inside the call
    - rows owned by the signed-in user (row-level security); other users' rows are invisible
    - server-assigned id and created_at; select ordered newest first
    - update/delete matching no visible row fail
    """

    name = "offline demo"

    def __init__(self, *, auto_confirm: bool = True, latency: float = 0.0) -> None:
        self.auto_confirm = auto_confirm
        self.latency = latency

        self._users: dict[str, _User] = {}
        self._rows: dict[int, Task] = {}
        self._session: Session | None = None
        self._subscribers: dict[int, SessionCallback] = {}

        self._next_row_id = itertools.count(1)
        self._next_sub_id = itertools.count(1)
        self._clock_base = datetime.now(timezone.utc)
        self._ticks = itertools.count()

    # ---- helpers ----

    async def _roundtrip(self) -> None:
        # Yield to the loop like a real network call would.
        await asyncio.sleep(self.latency)

    def _now(self) -> datetime:
        # Strictly increasing so created_at ordering is deterministic.
        return self._clock_base + timedelta(microseconds=next(self._ticks))

    def _notify(self, event: AuthEvent, session: Session | None) -> None:
        for callback in list(self._subscribers.values()):
            try:
                callback(event, session)
            except Exception:
                logger.exception("Session subscriber failed on %s", event.value)

    def _issue_session(self, user: _User) -> Session:
        return Session(
            user_id=user.id,
            email=user.email,
            access_token=secrets.token_urlsafe(24),
            refresh_token=secrets.token_urlsafe(16),
            expires_at=int(time.time()) + SESSION_TTL_SECONDS,
        )

    def _require_user(self) -> str:
        if self._session is None:
            raise DataServiceError(
                "new row violates row-level security policy for table \"tasks\"",
                status="42501",
            )
        return self._session.user_id

    def _visible(self, task_id: TaskId) -> Task | None:
        owner = self._require_user()
        try:
            row = self._rows.get(int(task_id))
        except (TypeError, ValueError):
            raise DataServiceError(
                f'invalid input syntax for type bigint: "{task_id}"', status="22P02"
            ) from None
        if row is None or row.user_id != owner:
            return None
        return row

    # ---- AuthClient ----

    async def get_session(self) -> Session | None:
        await self._roundtrip()
        return self._session

    def on_session_change(self, callback: SessionCallback) -> _Subscription:
        sub_id = next(self._next_sub_id)
        self._subscribers[sub_id] = callback
        return _Subscription(self, sub_id)

    async def sign_up(self, email: str, password: str) -> Session | None:
        await self._roundtrip()
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise AuthServiceError("Unable to validate email address: invalid format", status=400)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthServiceError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters.", status=422
            )
        if email in self._users:
            raise AuthServiceError("User already registered", status=422)

        user = self.create_user(email, password, confirmed=self.auto_confirm)
        logger.debug("Offline sign-up user_id=%s confirmed=%s", user.id, user.confirmed)

        if not user.confirmed:
            return None
        self._session = self._issue_session(user)
        self._notify(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_in(self, email: str, password: str) -> Session:
        await self._roundtrip()
        user = self._users.get((email or "").strip().lower())
        if user is None or user.password != password:
            raise AuthServiceError("Invalid login credentials", status=400)
        if not user.confirmed:
            raise AuthServiceError("Email not confirmed", status=400)

        self._session = self._issue_session(user)
        self._notify(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_out(self) -> None:
        await self._roundtrip()
        if self._session is None:
            return
        self._session = None
        self._notify(AuthEvent.SIGNED_OUT, None)

    def create_user(self, email: str, password: str, *, confirmed: bool = True) -> _User:
        """Register a user directly (no validation, no notification)."""
        key = email.strip().lower()
        user = _User(id=str(uuid.uuid4()), email=key, password=password, confirmed=confirmed)
        self._users[key] = user
        return user

    def confirm_email(self, email: str) -> None:
        """Mark a pending sign-up as confirmed (the offline equivalent of the email link)."""
        user = self._users.get(email.strip().lower())
        if user is None:
            raise KeyError(email)
        user.confirmed = True

    def refresh_tokens(self) -> Session | None:
        """Rotate the current session's tokens and emit TOKEN_REFRESHED."""
        if self._session is None:
            return None
        self._session = replace(
            self._session,
            access_token=secrets.token_urlsafe(24),
            expires_at=int(time.time()) + SESSION_TTL_SECONDS,
        )
        self._notify(AuthEvent.TOKEN_REFRESHED, self._session)
        return self._session

    # ---- TaskTable ----

    async def select_all(self) -> list[Task]:
        await self._roundtrip()
        if self._session is None:
            return []
        owner = self._session.user_id
        rows = [replace(t) for t in self._rows.values() if t.user_id == owner]
        rows.sort(key=lambda t: t.created_at, reverse=True)
        return rows

    async def insert(self, text: str) -> Task:
        await self._roundtrip()
        owner = self._require_user()
        if text is None or str(text) == "":
            raise DataServiceError(
                'null value in column "text" of relation "tasks" violates not-null constraint',
                status="23502",
            )
        row = Task(
            id=next(self._next_row_id),
            text=str(text),
            is_completed=False,
            created_at=self._now(),
            user_id=owner,
        )
        self._rows[int(row.id)] = row
        return replace(row)

    async def update_completed(self, task_id: TaskId, is_completed: bool) -> Task:
        await self._roundtrip()
        row = self._visible(task_id)
        if row is None:
            raise DataServiceError(f"No task with id {task_id}", status=404)
        row.is_completed = bool(is_completed)
        return replace(row)

    async def delete(self, task_id: TaskId) -> None:
        await self._roundtrip()
        row = self._visible(task_id)
        if row is None:
            raise DataServiceError(f"No task with id {task_id}", status=404)
        del self._rows[int(row.id)]

    async def close(self) -> None:
        self._subscribers.clear()
