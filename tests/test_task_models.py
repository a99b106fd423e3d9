# tests/test_task_models.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from supa_todos.auth.session_models import AuthEvent, Session
from supa_todos.tasks.task_models import Task, parse_timestamp


def test_from_row_parses_postgrest_row() -> None:
    t = Task.from_row(
        {
            "id": 42,
            "text": "Buy milk",
            "is_completed": None,
            "created_at": "2024-05-01T10:20:30.123456+00:00",
            "user_id": "8d0b6f0e-0000-4000-8000-000000000001",
        }
    )
    assert t.id == 42
    assert t.text == "Buy milk"
    assert t.is_completed is False
    assert t.created_at == datetime(2024, 5, 1, 10, 20, 30, 123456, tzinfo=timezone.utc)
    assert t.user_id == "8d0b6f0e-0000-4000-8000-000000000001"


def test_from_row_rejects_incomplete_rows() -> None:
    with pytest.raises(ValueError):
        Task.from_row({"text": "no id"})
    with pytest.raises(ValueError):
        Task.from_row({"id": 1})


def test_parse_timestamp_variants() -> None:
    assert parse_timestamp("2024-05-01T10:20:30Z") == datetime(2024, 5, 1, 10, 20, 30, tzinfo=timezone.utc)
    # naive -> UTC
    assert parse_timestamp("2024-05-01T10:20:30").tzinfo == timezone.utc
    # missing -> epoch, sorts last
    assert parse_timestamp(None) == datetime.fromtimestamp(0, tz=timezone.utc)


def test_auth_event_parse_tolerates_unknown_names() -> None:
    assert AuthEvent.parse("SIGNED_IN") is AuthEvent.SIGNED_IN
    assert AuthEvent.parse(AuthEvent.SIGNED_OUT) is AuthEvent.SIGNED_OUT
    assert AuthEvent.parse("SOMETHING_NEW") is AuthEvent.USER_UPDATED


def test_session_repr_hides_tokens() -> None:
    s = Session(user_id="u1", email="a@b.c", access_token="secret-access", refresh_token="secret-refresh")
    assert "secret" not in repr(s)
    assert s.same_user(Session(user_id="u1", email=None))
    assert not s.same_user(None)
