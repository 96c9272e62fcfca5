"""Bounded, id-keyed command history logs."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator

from .models import CommandEvent, UpsertResult

logger = logging.getLogger(__name__)

GLOBAL_HISTORY_LIMIT = 100
AGENT_HISTORY_LIMIT = 50


class HistoryLog:
    """Newest-first log of command events with idempotent upsert.

    A repeat event for a known id replaces the record at its current position;
    a new id goes to the front. Overflow is dropped from the back (oldest).
    """

    def __init__(self, capacity: int, *, ignore_stale: bool = True) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.ignore_stale = ignore_stale
        self._order: deque[str] = deque()
        self._records: dict[str, CommandEvent] = {}

    def upsert(self, event: CommandEvent) -> UpsertResult:
        existing = self._records.get(event.command_id)
        if existing is not None:
            if self._is_stale(existing, event):
                logger.debug(
                    "Ignoring stale update for command %s (%s < %s)",
                    event.command_id,
                    event.timestamp,
                    existing.timestamp,
                )
                return UpsertResult.STALE
            self._records[event.command_id] = event
            return UpsertResult.UPDATED

        self._order.appendleft(event.command_id)
        self._records[event.command_id] = event
        while len(self._order) > self.capacity:
            evicted = self._order.pop()
            del self._records[evicted]
        return UpsertResult.INSERTED

    def load(self, events: Iterable[CommandEvent]) -> None:
        """Apply a backlog in delivery order; the last event ends up first."""
        for event in events:
            self.upsert(event)

    def _is_stale(self, existing: CommandEvent, incoming: CommandEvent) -> bool:
        if not self.ignore_stale:
            return False
        if existing.timestamp is None or incoming.timestamp is None:
            return False
        return incoming.timestamp < existing.timestamp

    def entries(self) -> list[CommandEvent]:
        return [self._records[command_id] for command_id in self._order]

    def get(self, command_id: str) -> CommandEvent | None:
        return self._records.get(command_id)

    def position(self, command_id: str) -> int | None:
        try:
            return self._order.index(command_id)
        except ValueError:
            return None

    def clear(self) -> None:
        self._order.clear()
        self._records.clear()

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._records

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[CommandEvent]:
        return iter(self.entries())


class HistoryBook:
    """The global log plus one log per agent."""

    def __init__(
        self,
        *,
        global_limit: int = GLOBAL_HISTORY_LIMIT,
        agent_limit: int = AGENT_HISTORY_LIMIT,
        ignore_stale: bool = True,
    ) -> None:
        self.agent_limit = agent_limit
        self.ignore_stale = ignore_stale
        self.global_log = HistoryLog(global_limit, ignore_stale=ignore_stale)
        self._agent_logs: dict[str, HistoryLog] = {}

    def record(self, event: CommandEvent) -> UpsertResult:
        """Upsert into the global log and, when attributed, the agent's log."""
        result = self.global_log.upsert(event)
        if event.agent_id:
            self.ensure(event.agent_id).upsert(event)
        return result

    def ensure(self, agent_id: str) -> HistoryLog:
        log = self._agent_logs.get(agent_id)
        if log is None:
            log = HistoryLog(self.agent_limit, ignore_stale=self.ignore_stale)
            self._agent_logs[agent_id] = log
        return log

    def agent_log(self, agent_id: str) -> HistoryLog | None:
        return self._agent_logs.get(agent_id)

    def clear_agent(self, agent_id: str) -> bool:
        log = self._agent_logs.get(agent_id)
        if log is None:
            return False
        log.clear()
        return True

    def discard(self, agent_id: str) -> None:
        self._agent_logs.pop(agent_id, None)

    def agent_ids(self) -> list[str]:
        return list(self._agent_logs)
