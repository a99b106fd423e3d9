# tests/test_console.py

from __future__ import annotations

import asyncio
import threading

import pytest

from supa_todos.auth.session_models import AuthEvent
from supa_todos.cli.bootstrap import shutdown
from supa_todos.connectors.console_connector import mask_secrets, read_line_in_thread, run_console_loop
from supa_todos.ui.view import EMPTY_LIST_TEXT

from .conftest import ALICE


def _scripted(lines: list[str]):
    it = iter(lines)

    def read_line(prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return read_line


@pytest.mark.asyncio
async def test_console_session_end_to_end(state, backend) -> None:
    out: list[str] = []
    script = [
        f"/signin {ALICE[0]} wrong-password",
        "Buy milk",
        f"/signin {ALICE[0]} {ALICE[1]}",
        "Buy milk",
        "/done 1",
        "/rm 1",
        "/signout",
        "/exit",
        "never read",
    ]

    await state.view.mount()
    try:
        await run_console_loop(state, read_line=_scripted(script), out=out.append)
    finally:
        await shutdown(state)

    text = "\n".join(out)
    assert "[!] Invalid login credentials" in text
    assert "Sign in first" in text
    assert "1. [ ] Buy milk" in text
    assert "1. [x]" in text
    assert EMPTY_LIST_TEXT in text
    # last screen after /signout is the auth form again
    assert "Sign in or create an account" in out[-1]
    assert backend.count("insert") == 1
    assert backend.subscriber_count == 0


@pytest.mark.asyncio
async def test_console_exits_on_eof_and_survives_handler_errors(state, backend) -> None:
    out: list[str] = []

    def broken_insert(text: str):
        raise RuntimeError("boom")

    await state.view.mount()
    backend.insert = broken_insert  # type: ignore[method-assign]
    try:
        await run_console_loop(
            state,
            read_line=_scripted([f"/signin {ALICE[0]} {ALICE[1]}", "/add crash", "/ls"]),
            out=out.append,
        )
    finally:
        await shutdown(state)

    assert "Internal error while handling a command." in out
    assert EMPTY_LIST_TEXT in out[-1]


@pytest.mark.asyncio
async def test_session_events_are_applied_while_waiting_for_input(state, backend) -> None:
    """A token refresh scheduled on the loop lands while the prompt is blocked."""
    refreshed = threading.Event()
    seen_while_blocked: list[bool] = []

    def on_change(event: AuthEvent, session) -> None:
        if event is AuthEvent.SIGNED_IN:
            asyncio.get_running_loop().call_later(0.05, backend.refresh_tokens)
        elif event is AuthEvent.TOKEN_REFRESHED:
            refreshed.set()

    lines = iter([f"/signin {ALICE[0]} {ALICE[1]}"])

    def read_line(prompt: str) -> str:
        line = next(lines, None)
        if line is not None:
            return line
        # Second prompt: block this thread until the loop has delivered the refresh.
        seen_while_blocked.append(refreshed.wait(timeout=5))
        return "/exit"

    await state.view.mount()
    sub = state.controller.subscribe(on_change)
    try:
        await run_console_loop(state, read_line=read_line, out=lambda _line: None)
    finally:
        sub.unsubscribe()
        await shutdown(state)

    assert seen_while_blocked == [True]
    assert backend.count("select_all") == 1


@pytest.mark.asyncio
async def test_reader_errors_are_raised_in_the_loop() -> None:
    def interrupted(prompt: str) -> str:
        raise KeyboardInterrupt

    with pytest.raises(EOFError):
        await read_line_in_thread(_scripted([]), "> ")
    with pytest.raises(KeyboardInterrupt):
        await read_line_in_thread(interrupted, "> ")
    assert await read_line_in_thread(_scripted(["hello"]), "> ") == "hello"


def test_mask_secrets_hides_passwords_only() -> None:
    assert mask_secrets("/signin a@b.c hunter2") == "/signin a@b.c ********"
    assert mask_secrets("/SIGNUP a@b.c p w") == "/SIGNUP a@b.c ********"
    assert mask_secrets("/login a@b.c") == "/login a@b.c"
    assert mask_secrets("/add buy milk") == "/add buy milk"
    assert mask_secrets("plain text") == "plain text"
