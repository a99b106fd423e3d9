# src/supa_todos/tasks/task_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

TaskId = int | str


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse a PostgREST timestamp (ISO-8601 string) into an aware datetime.

    Naive values are taken as UTC. Missing values become the epoch so such rows sort last.
    """
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if not raw:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    s = str(raw).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class Task:
    id: TaskId
    text: str
    is_completed: bool
    created_at: datetime
    user_id: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Task:
        if row.get("id") is None:
            raise ValueError("task row has no id")
        text = row.get("text")
        if text is None:
            raise ValueError(f"task row {row.get('id')!r} has no text")

        owner = row.get("user_id")
        return cls(
            id=row["id"],
            text=str(text),
            is_completed=bool(row.get("is_completed") or False),
            created_at=parse_timestamp(row.get("created_at")),
            user_id=str(owner) if owner is not None else None,
        )
