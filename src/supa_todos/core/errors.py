# src/supa_todos/core/errors.py

from __future__ import annotations


class RemoteServiceError(RuntimeError):
    """
    A call to the remote service failed.

    `message` is the text the service produced; it is shown to the user verbatim.
    """

    def __init__(self, message: str, *, status: int | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class AuthServiceError(RemoteServiceError):
    """Sign-up / sign-in / sign-out failures (bad credentials, duplicate user, ...)."""


class DataServiceError(RemoteServiceError):
    """Table operation failures (network, permission denied, missing row, ...)."""


def friendly_error_message(exc: BaseException) -> str:
    """Text to show the user for a failed remote call."""
    msg = getattr(exc, "message", None)
    if isinstance(msg, str) and msg.strip():
        return msg.strip()
    text = str(exc).strip()
    return text or exc.__class__.__name__
