# src/supa_todos/connectors/console_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import threading
from collections.abc import Callable

from ..cli.commands import SECRET_COMMANDS, CommandEmitter, CommandRegistry, handle_plain_text
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = "> "

LineReader = Callable[[str], str]
Printer = Callable[[str], None]


def mask_secrets(line: str) -> str:
    """Hide the password in '/signin <email> <password>' style lines."""
    if not line.startswith("/"):
        return line
    parts = line.split()
    if parts and parts[0][1:].lower() in SECRET_COMMANDS and len(parts) >= 3:
        parts[2:] = ["*" * 8]
        return " ".join(parts)
    return line


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, do nothing (the input was not echoed).
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
    except OSError:
        logger.debug("Could not rewrite terminal line.", exc_info=True)


async def read_line_in_thread(read_line: LineReader, prompt: str) -> str:
    """
    Call the blocking `read_line` on a daemon thread and await its result.

    The event loop keeps running meanwhile (auth notifications, token refresh timers,
    background refreshes). The thread is a daemon and not an executor worker: a pending
    input() must never block interpreter exit.
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[str] = loop.create_future()

    def settle(line: str | None, exc: BaseException | None) -> None:
        if fut.done():
            return
        if exc is not None:
            fut.set_exception(exc)
        else:
            fut.set_result(line or "")

    def reader() -> None:
        try:
            line = read_line(prompt)
        except (Exception, KeyboardInterrupt) as e:
            result: tuple[str | None, BaseException | None] = (None, e)
        else:
            result = (line, None)
        # The loop may already be closed if the app shut down while we were blocked.
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(settle, *result)

    threading.Thread(target=reader, name="console-input", daemon=True).start()
    return await fut


async def _dispatch(
    state: AppState,
    registry: CommandRegistry,
    line: str,
    emit: CommandEmitter,
) -> str | None:
    if registry.is_command(line):
        reply = await registry.handle(state, line, emit=emit)
    else:
        reply = await handle_plain_text(state, line)
    # Session notifications may have scheduled a refresh; show its result, not a stale list.
    await state.controller.wait_idle()
    return reply


async def run_console_loop(
    state: AppState,
    *,
    registry: CommandRegistry = command_registry,
    read_line: LineReader = input,
    out: Printer = print,
) -> None:
    """
    Interactive REPL on top of a mounted TaskListView.

    Input is read on a helper thread so the loop stays live between commands; each
    action runs to completion before the next line is read.
    After every action: print alerts, then either the command's reply or the re-rendered view.
    """
    logger.info("Console connector started (backend=%s).", getattr(state.backend, "name", "?"))

    def flush_alerts() -> None:
        for msg in state.drain_alerts():
            out(f"[!] {msg}")

    await state.controller.wait_idle()
    flush_alerts()
    out(state.view.render())
    out("Type /help for commands, /exit to quit.")

    while True:
        try:
            user_input = (await read_line_in_thread(read_line, PROMPT)).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            out("")
            break

        if not user_input:
            continue

        masked = mask_secrets(user_input)
        if masked != user_input:
            _rewrite_prev_line(f"{PROMPT}{masked}")

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await _dispatch(state, registry, user_input, out)
        except Exception:
            logger.exception("Command handler crashed: %s", masked)
            reply = "Internal error while handling a command."

        flush_alerts()
        out(reply if reply is not None else state.view.render())

    logger.info("Console connector finished.")
