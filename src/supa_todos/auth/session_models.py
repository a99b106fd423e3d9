# src/supa_todos/auth/session_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class AuthEvent(StrEnum):
    """
    Session-change notifications emitted by the auth service.

    Values match the event names the Supabase auth client uses.
    """

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"

    @classmethod
    def parse(cls, raw: Any) -> AuthEvent:
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw))
        except ValueError:
            return cls.USER_UPDATED


@dataclass(frozen=True, slots=True)
class Session:
    """Authenticated user context. Tokens are opaque and owned by the auth service."""

    user_id: str
    email: str | None
    access_token: str = ""
    refresh_token: str = ""
    expires_at: int | None = None

    def same_user(self, other: Session | None) -> bool:
        return other is not None and other.user_id == self.user_id

    def __repr__(self) -> str:
        # keep tokens out of logs and tracebacks
        return f"Session(user_id={self.user_id!r}, email={self.email!r}, expires_at={self.expires_at!r})"
