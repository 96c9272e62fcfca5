from __future__ import annotations

import pytest

from fleet_console.console.history import HistoryBook, HistoryLog
from fleet_console.console.models import CommandEvent, CommandStatus, UpsertResult


def _event(command_id: str, status: str = "pending", **extra: object) -> CommandEvent:
    payload: dict[str, object] = {"id": command_id, "status": status}
    payload.update(extra)
    return CommandEvent.from_payload(payload)


def test_pending_then_success_updates_single_entry() -> None:
    log = HistoryLog(3)

    assert log.upsert(_event("1", "pending", command="uptime")) is UpsertResult.INSERTED
    assert log.upsert(_event("1", "success", output="ok")) is UpsertResult.UPDATED

    entries = log.entries()
    assert len(entries) == 1
    assert entries[0].status is CommandStatus.SUCCESS
    assert entries[0].output == "ok"


def test_update_keeps_original_position() -> None:
    log = HistoryLog(10)
    log.upsert(_event("a"))
    log.upsert(_event("b"))
    log.upsert(_event("c"))

    log.upsert(_event("a", "failed", output="boom"))

    assert [e.command_id for e in log.entries()] == ["c", "b", "a"]
    assert log.position("a") == 2
    assert log.get("a").status is CommandStatus.FAILED


def test_new_entries_are_inserted_newest_first() -> None:
    log = HistoryLog(10)
    for command_id in ("1", "2", "3"):
        log.upsert(_event(command_id))

    assert [e.command_id for e in log] == ["3", "2", "1"]


def test_capacity_evicts_oldest_entries() -> None:
    log = HistoryLog(5)
    for i in range(12):
        log.upsert(_event(str(i)))

    assert len(log) == 5
    assert [e.command_id for e in log.entries()] == ["11", "10", "9", "8", "7"]
    assert "0" not in log
    assert log.get("6") is None


def test_agent_log_of_fifty_drops_first_of_fifty_one() -> None:
    log = HistoryLog(50)
    for i in range(51):
        log.upsert(_event(f"cmd-{i}"))

    assert len(log) == 50
    assert "cmd-0" not in log
    assert "cmd-50" in log


def test_update_to_evicted_id_reinserts_at_front() -> None:
    log = HistoryLog(2)
    log.upsert(_event("a"))
    log.upsert(_event("b"))
    log.upsert(_event("c"))

    assert log.upsert(_event("a", "success")) is UpsertResult.INSERTED
    assert [e.command_id for e in log.entries()] == ["a", "c"]


def test_stale_update_is_ignored_when_timestamps_regress() -> None:
    log = HistoryLog(5)
    log.upsert(_event("1", "success", output="done", timestamp="2026-02-12T12:00:05Z"))

    result = log.upsert(_event("1", "pending", timestamp="2026-02-12T12:00:00Z"))

    assert result is UpsertResult.STALE
    assert log.get("1").status is CommandStatus.SUCCESS


def test_stale_updates_can_be_allowed() -> None:
    log = HistoryLog(5, ignore_stale=False)
    log.upsert(_event("1", "success", timestamp="2026-02-12T12:00:05Z"))

    result = log.upsert(_event("1", "pending", timestamp="2026-02-12T12:00:00Z"))

    assert result is UpsertResult.UPDATED
    assert log.get("1").status is CommandStatus.PENDING


def test_missing_timestamp_falls_back_to_last_write_wins() -> None:
    log = HistoryLog(5)
    log.upsert(_event("1", "pending", timestamp="2026-02-12T12:00:05Z"))

    assert log.upsert(_event("1", "success")) is UpsertResult.UPDATED
    assert log.get("1").status is CommandStatus.SUCCESS


def test_load_applies_backlog_in_order() -> None:
    log = HistoryLog(10)

    log.load([_event("old"), _event("new")])

    assert [e.command_id for e in log.entries()] == ["new", "old"]


def test_invalid_capacity_raises() -> None:
    with pytest.raises(ValueError):
        HistoryLog(0)


def test_events_without_id_never_collide() -> None:
    log = HistoryLog(5)

    log.upsert(CommandEvent.from_payload({"status": "success"}))
    log.upsert(CommandEvent.from_payload({"status": "success"}))

    assert len(log) == 2


def test_book_records_into_global_and_agent_logs() -> None:
    book = HistoryBook(global_limit=100, agent_limit=50)

    book.record(_event("1", client_id="aaa"))
    book.record(_event("2"))

    assert [e.command_id for e in book.global_log.entries()] == ["2", "1"]
    agent_log = book.agent_log("aaa")
    assert agent_log is not None
    assert [e.command_id for e in agent_log.entries()] == ["1"]
    assert book.agent_ids() == ["aaa"]


def test_book_clear_agent_leaves_global_log() -> None:
    book = HistoryBook()
    book.record(_event("1", client_id="aaa"))

    assert book.clear_agent("aaa") is True
    assert book.clear_agent("missing") is False

    assert len(book.agent_log("aaa")) == 0
    assert len(book.global_log) == 1


def test_book_discard_drops_agent_log() -> None:
    book = HistoryBook()
    book.record(_event("1", client_id="aaa"))

    book.discard("aaa")

    assert book.agent_log("aaa") is None
    assert "1" in book.global_log
