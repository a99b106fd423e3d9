# src/supa_todos/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState
from ..ui.view import ViewState

CommandEmitter = Callable[[str], None]
CommandHandler3 = Callable[[AppState, list[str], str], Awaitable[str | None]]
CommandHandler4 = Callable[[AppState, list[str], str, CommandEmitter | None], Awaitable[str | None]]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)

# Commands whose arguments include a password; the console masks them when echoing.
SECRET_COMMANDS = frozenset({"signin", "login", "signup"})


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def is_command(self, line: str) -> bool:
        return line.startswith("/")

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string (or None when the command has nothing to say).
        """
        if not self.is_command(line):
            return None

        body = line[1:].strip()
        if not body:
            return "Empty command. Use /help to list available commands."

        name, _, rest = body.partition(" ")
        name = name.lower()
        rest = rest.strip()
        args = rest.split()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 4

        if nparams >= 4:
            h4 = cast(CommandHandler4, handler)
            return await h4(state, args, rest, emit)

        h3 = cast(CommandHandler3, handler)
        return await h3(state, args, rest)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def _split_credentials(rest: str) -> tuple[str, str] | None:
    """'<email> <password>' where the password is everything after the email."""
    email, _, password = rest.partition(" ")
    password = password.lstrip()
    if not email or not password:
        return None
    return email, password


def _parse_position(args: list[str], usage: str) -> int | str:
    """Return a 1-based position, or a usage/error string."""
    if len(args) != 1:
        return usage
    try:
        pos = int(args[0].lstrip("#"))
    except ValueError:
        return f"Not a task number: {args[0]}"
    if pos < 1:
        return f"Not a task number: {args[0]}"
    return pos


async def cmd_help(state: AppState, args: list[str], rest: str) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str], rest: str) -> str:
    view = state.view
    session = state.controller.session
    who = session.email if session is not None else "(not signed in)"
    return (
        "Status:\n"
        f"  Backend: {getattr(state.backend, 'name', 'unknown')}\n"
        f"  View: {view.state.value}\n"
        f"  User: {who}\n"
        f"  Tasks cached: {len(state.store)}"
    )


async def cmd_signup(
    state: AppState,
    args: list[str],
    rest: str,
    emit: CommandEmitter | None = None,
) -> str | None:
    """
    /signup <email> <password>
    """
    creds = _split_credentials(rest)
    if creds is None:
        return "Usage: /signup <email> <password>"
    if emit:
        emit("Loading...")
    await state.view.sign_up(*creds)
    return None


async def cmd_signin(
    state: AppState,
    args: list[str],
    rest: str,
    emit: CommandEmitter | None = None,
) -> str | None:
    """
    /signin <email> <password>
    """
    creds = _split_credentials(rest)
    if creds is None:
        return "Usage: /signin <email> <password>"
    if emit:
        emit("Loading...")
    await state.view.sign_in(*creds)
    return None


async def cmd_signout(state: AppState, args: list[str], rest: str) -> str | None:
    await state.view.sign_out()
    return None


async def cmd_list(state: AppState, args: list[str], rest: str) -> str:
    return state.view.render()


async def cmd_add(state: AppState, args: list[str], rest: str) -> str | None:
    """
    /add <text>     (empty text is ignored)
    """
    await state.view.add(rest)
    return None


async def cmd_done(state: AppState, args: list[str], rest: str) -> str | None:
    """
    /done <n>   -> toggle completion of task number n
    """
    pos = _parse_position(args, "Usage: /done <task number>")
    if isinstance(pos, str):
        return pos
    await state.view.toggle(pos)
    return None


async def cmd_rm(state: AppState, args: list[str], rest: str) -> str | None:
    """
    /rm <n>   -> delete task number n
    """
    pos = _parse_position(args, "Usage: /rm <task number>")
    if isinstance(pos, str):
        return pos
    await state.view.remove(pos)
    return None


async def cmd_refresh(state: AppState, args: list[str], rest: str) -> str | None:
    await state.view.refresh()
    return None


async def handle_plain_text(state: AppState, line: str) -> str | None:
    """Non-command input: add it as a task when signed in, otherwise point at /signin."""
    if state.view.state == ViewState.AUTHENTICATED:
        await state.view.add(line)
        return None
    return "Sign in first: /signin <email> <password> (or /signup to create an account)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, user and cache size.")
registry.register("signup", cmd_signup, help_text="Create an account: /signup <email> <password>.")
registry.register(
    "signin", cmd_signin, help_text="Sign in: /signin <email> <password>.", aliases=["login"]
)
registry.register("signout", cmd_signout, help_text="Sign out.", aliases=["logout"])
registry.register("list", cmd_list, help_text="Show the task list.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <text> (plain text works too).")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n>.", aliases=["del"])
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the server.")
