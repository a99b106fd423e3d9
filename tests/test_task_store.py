# tests/test_task_store.py

from __future__ import annotations

import pytest

from .conftest import ALICE, BOB


@pytest.mark.asyncio
async def test_add_then_refresh_has_exactly_one_incomplete_row(backend, store, alerts) -> None:
    backend.start_session(ALICE[0])

    task = await store.add("Buy milk")
    assert task is not None
    assert task.is_completed is False

    assert await store.refresh() is True
    matching = [t for t in store.tasks if t.text == "Buy milk"]
    assert len(matching) == 1
    assert matching[0].is_completed is False
    assert alerts == []


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
async def test_blank_text_is_rejected_without_remote_call(backend, store, alerts, text) -> None:
    backend.start_session(ALICE[0])
    await store.add("existing")
    before = store.tasks
    backend.calls.clear()

    assert await store.add(text) is None

    assert backend.calls == []
    assert store.tasks == before
    assert alerts == []


@pytest.mark.asyncio
async def test_add_prepends_server_row_and_trims(backend, store) -> None:
    backend.start_session(ALICE[0])

    first = await store.add("first")
    second = await store.add("  second  ")

    assert [t.text for t in store.tasks] == ["second", "first"]
    assert second is not None and first is not None
    assert second.id != first.id
    assert second.created_at > first.created_at
    assert second.user_id == backend._session.user_id


@pytest.mark.asyncio
async def test_add_failure_alerts_and_keeps_list(backend, store, alerts) -> None:
    backend.start_session(ALICE[0])
    await store.add("keep me")
    backend.fail_next["insert"] = "permission denied for table tasks"

    assert await store.add("lost") is None

    assert [t.text for t in store.tasks] == ["keep me"]
    assert alerts == ["permission denied for table tasks"]


@pytest.mark.asyncio
async def test_toggle_round_trip_restores_flag(backend, store) -> None:
    backend.start_session(ALICE[0])
    task = await store.add("Walk dog")
    assert task is not None

    assert await store.toggle_complete(task.id, False) is True
    assert store.get(task.id).is_completed is True

    assert await store.toggle_complete(task.id, True) is True
    assert store.get(task.id).is_completed is False

    # remote agrees with the local copy
    await store.refresh()
    assert store.get(task.id).is_completed is False


@pytest.mark.asyncio
async def test_toggle_sends_negated_current_flag(backend, store) -> None:
    backend.start_session(ALICE[0])
    task = await store.add("Stale")
    assert task is not None

    # Blind update: the caller's view of the flag decides, not the server row.
    assert await store.toggle_complete(task.id, True) is True
    remote = await backend.select_all()
    assert remote[0].is_completed is False


@pytest.mark.asyncio
async def test_toggle_failure_leaves_local_copy(backend, store, alerts) -> None:
    backend.start_session(ALICE[0])
    task = await store.add("Pay rent")
    assert task is not None
    backend.fail_next["update_completed"] = "network down"

    assert await store.toggle_complete(task.id, False) is False

    assert store.get(task.id).is_completed is False
    assert alerts == ["network down"]


@pytest.mark.asyncio
async def test_remove_existing_removes_exactly_one(backend, store, alerts) -> None:
    backend.start_session(ALICE[0])
    a = await store.add("a")
    await store.add("b")
    await store.add("c")
    assert a is not None

    assert await store.remove(a.id) is True

    assert [t.text for t in store.tasks] == ["c", "b"]
    assert store.get(a.id) is None
    assert alerts == []


@pytest.mark.asyncio
async def test_remove_missing_id_is_local_noop_and_reports(backend, store, alerts) -> None:
    backend.start_session(ALICE[0])
    await store.add("only")
    before = store.tasks

    assert await store.remove(999) is False

    assert store.tasks == before
    assert alerts == ["No task with id 999"]


@pytest.mark.asyncio
async def test_refresh_replaces_list_newest_first(backend, store) -> None:
    backend.start_session(ALICE[0])
    await store.add("local only view")
    # rows written by another client
    await backend.insert("from elsewhere 1")
    await backend.insert("from elsewhere 2")

    assert await store.refresh() is True

    assert [t.text for t in store.tasks] == [
        "from elsewhere 2",
        "from elsewhere 1",
        "local only view",
    ]


@pytest.mark.asyncio
async def test_refresh_only_sees_own_rows(backend, store) -> None:
    backend.start_session(BOB[0])
    await backend.insert("bob's")
    backend.start_session(ALICE[0])
    await backend.insert("alice's")

    await store.refresh()

    assert [t.text for t in store.tasks] == ["alice's"]


@pytest.mark.asyncio
async def test_refresh_failure_keeps_previous_list(backend, store, alerts) -> None:
    backend.start_session(ALICE[0])
    await store.add("cached")
    backend.fail_next["select_all"] = "Failed to fetch"

    assert await store.refresh() is False

    assert [t.text for t in store.tasks] == ["cached"]
    assert alerts == ["Failed to fetch"]


@pytest.mark.asyncio
async def test_clear_makes_no_remote_call(backend, store) -> None:
    backend.start_session(ALICE[0])
    await store.add("x")
    backend.calls.clear()

    store.clear()

    assert len(store) == 0
    assert backend.calls == []
