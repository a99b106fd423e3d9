# src/supa_todos/auth/session_controller.py

from __future__ import annotations

"""
Session controller.

Owns the current Session (present or absent) and keeps the task mirror in step with it:
- session becomes present      -> refresh the task list (background task)
- same user, new tokens        -> nothing to refetch
- different user               -> clear, then refresh
- session becomes absent       -> clear the task list

The session is only ever set from the auth service's change notifications (and the
startup lookup in initialize()). sign_in()/sign_up() never assign it from their return
value, so a login is applied exactly once.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from ..core.errors import AuthServiceError, friendly_error_message
from ..core.ports import Alert, AuthClient, SessionCallback, Subscription
from ..tasks.task_store import TaskListStore
from .session_models import AuthEvent, Session

logger = logging.getLogger(__name__)

SIGN_UP_CHECK_EMAIL = "Sign up successful! Please check your email to verify."


class _Listener:
    """Unsubscribe handle for a controller-level listener."""

    def __init__(self, owner: SessionController, callback: SessionCallback) -> None:
        self._owner = owner
        self.callback = callback

    def unsubscribe(self) -> None:
        self._owner._drop_listener(self)


class SessionController:
    def __init__(self, auth: AuthClient, store: TaskListStore, alert: Alert) -> None:
        self._auth = auth
        self._store = store
        self._alert = alert

        self._session: Session | None = None
        self._remote_sub: Subscription | None = None
        self._listeners: list[_Listener] = []
        self._background: set[asyncio.Task[Any]] = set()

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    # ---- lifecycle ----

    async def initialize(self) -> None:
        """
        Look up an existing session and start listening for session changes.

        Safe to call once per controller; a second call is a no-op.
        """
        if self._remote_sub is not None:
            return

        self._remote_sub = self._auth.on_session_change(self._on_session_change)

        try:
            existing = await self._auth.get_session()
        except AuthServiceError as e:
            logger.warning("Initial session lookup failed: %s", friendly_error_message(e))
            existing = None

        # A notification may already have delivered the session while we were waiting.
        if existing is not None and not existing.same_user(self._session):
            self._apply(AuthEvent.INITIAL_SESSION, existing)

    async def teardown(self) -> None:
        """Release the remote subscription and listeners; let pending refreshes finish."""
        if self._remote_sub is not None:
            self._remote_sub.unsubscribe()
            self._remote_sub = None
            logger.debug("Session subscription released")
        self._listeners.clear()
        await self.wait_idle()

    def subscribe(self, callback: SessionCallback) -> Subscription:
        listener = _Listener(self, callback)
        self._listeners.append(listener)
        return listener

    def _drop_listener(self, listener: _Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    async def wait_idle(self) -> None:
        """
        Await background refreshes started by session notifications.

        Their failures are logged and alerted by the done-callback, not raised here.
        """
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- auth actions ----

    async def sign_up(self, email: str, password: str) -> bool:
        try:
            session = await self._auth.sign_up(email.strip(), password)
        except AuthServiceError as e:
            self._fail("sign-up", e)
            return False

        # Auto-confirmed accounts arrive through the SIGNED_IN notification.
        if session is None:
            self._alert(SIGN_UP_CHECK_EMAIL)
        logger.info("Sign-up accepted (confirmed=%s)", session is not None)
        return True

    async def sign_in(self, email: str, password: str) -> bool:
        try:
            await self._auth.sign_in(email.strip(), password)
        except AuthServiceError as e:
            self._fail("sign-in", e)
            return False
        return True

    async def sign_out(self) -> bool:
        try:
            await self._auth.sign_out()
            ok = True
        except AuthServiceError as e:
            self._fail("sign-out", e)
            ok = False
        finally:
            # Never leave the previous user's rows on screen.
            self._store.clear()
        return ok

    # ---- notifications ----

    def _on_session_change(self, event: AuthEvent, session: Session | None) -> None:
        self._apply(AuthEvent.parse(event), session)

    def _apply(self, event: AuthEvent, session: Session | None) -> None:
        previous = self._session
        self._session = session

        if session is None:
            if previous is not None:
                logger.info("Session ended (%s)", event.value)
            self._store.clear()
        elif previous is None:
            logger.info("Session started (%s) user_id=%s", event.value, session.user_id)
            self._spawn(self._store.refresh())
        elif not session.same_user(previous):
            logger.info("Session switched user (%s) user_id=%s", event.value, session.user_id)
            self._store.clear()
            self._spawn(self._store.refresh())
        else:
            logger.debug("Session updated (%s)", event.value)

        for listener in list(self._listeners):
            try:
                listener.callback(event, session)
            except Exception:
                logger.exception("Session listener failed")

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        # Remote failures are reported by the store; anything reaching here escaped it.
        logger.error("Background task list refresh crashed", exc_info=exc)
        self._alert(f"Could not load your tasks: {friendly_error_message(exc)}")

    def _fail(self, op: str, exc: AuthServiceError) -> None:
        msg = friendly_error_message(exc)
        logger.info("Auth %s failed: %s", op, msg)
        self._alert(msg)
