"""UI-agnostic console state: inbound event dispatch and local intents."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .focus import FocusMirror
from .history import AGENT_HISTORY_LIMIT, GLOBAL_HISTORY_LIMIT, HistoryBook, HistoryLog
from .models import (
    CommandEvent,
    FocusSnapshot,
    IntentOutcome,
    MediaFrame,
    Notice,
    NoticeLevel,
    RegistryDelta,
    StreamSubscription,
    UpsertResult,
)
from .presenters import ALL_TARGETS, agent_label
from .registry import AgentRegistry
from .services.transport import ConsoleTransport
from .streams import StreamSubscriptionManager

logger = logging.getLogger(__name__)

EMPTY_COMMAND_NOTICE = "Please enter a command"

InboundHandler = Callable[[Any], Any]


class DashboardConsole:
    """Owns the registry, history logs, subscriptions and focus target.

    Inbound events go through :meth:`handle`, which looks the event name up in
    a dispatch table. Every reaction (inbound or local) runs under one lock so
    reactions never interleave.
    """

    def __init__(
        self,
        transport: ConsoleTransport,
        *,
        global_history_limit: int = GLOBAL_HISTORY_LIMIT,
        agent_history_limit: int = AGENT_HISTORY_LIMIT,
        ignore_stale_updates: bool = True,
        notice_limit: int = 20,
    ) -> None:
        self._transport = transport
        self._lock = threading.RLock()
        self.registry = AgentRegistry()
        self.history = HistoryBook(
            global_limit=global_history_limit,
            agent_limit=agent_history_limit,
            ignore_stale=ignore_stale_updates,
        )
        self.streams = StreamSubscriptionManager(transport)
        self.focus_mirror = FocusMirror(self.streams, label_for=self._label_for)
        self.selected_target = ALL_TARGETS
        self.connected = False
        self._notices: deque[Notice] = deque(maxlen=notice_limit)
        self._handlers: dict[str, InboundHandler] = {
            "connect": self.on_connect,
            "disconnect": self.on_disconnect,
            "client_update": self.on_client_update,
            "command_response": self.on_command_response,
            "screen_frame": self.on_screen_frame,
        }

    @property
    def event_names(self) -> list[str]:
        return list(self._handlers)

    def handle(self, event: str, payload: Any = None) -> Any:
        """Route one inbound event to its handler; unknown names are ignored."""
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug("Ignoring unknown inbound event %r", event)
            return None
        with self._lock:
            return handler(payload)

    # Inbound handlers

    def on_connect(self, payload: Any = None) -> bool:
        del payload
        logger.info("Connected to server")
        self.connected = True
        return self._transport.request_snapshot()

    def on_disconnect(self, payload: Any = None) -> None:
        del payload
        logger.info("Disconnected from server")
        self.connected = False

    def on_client_update(self, payload: Any) -> RegistryDelta:
        if not isinstance(payload, Mapping):
            logger.warning("Ignoring malformed registry payload of type %s", type(payload).__name__)
            return RegistryDelta()
        delta = self.registry.apply_payload(payload)
        # Logs created by late or unregistered events are swept too.
        for agent_id in self.history.agent_ids():
            if agent_id not in self.registry:
                self.history.discard(agent_id)
        for agent_id in delta.added:
            self.history.ensure(agent_id)
        if self.selected_target != ALL_TARGETS and self.selected_target not in self.registry:
            self.selected_target = ALL_TARGETS
        return delta

    def on_command_response(self, payload: Any) -> UpsertResult:
        event = CommandEvent.from_payload(payload)
        return self.history.record(event)

    def on_screen_frame(self, payload: Any) -> StreamSubscription | None:
        frame = MediaFrame.from_payload(payload)
        if not frame.agent_id:
            logger.warning("Dropping screen frame without client_id")
            return None
        subscription = self.streams.on_frame(frame.agent_id, frame)
        self.focus_mirror.on_frame(frame.agent_id, subscription)
        return subscription

    # Local intents

    def request_snapshot(self) -> bool:
        with self._lock:
            return self._transport.request_snapshot()

    def send_command(self, target: str, text: str, *, label: str | None = None) -> IntentOutcome:
        """Dispatch ``text`` to one agent id or ``"all"``; empty text is rejected locally."""
        with self._lock:
            command = (text or "").strip()
            if not command:
                self._notify(NoticeLevel.ERROR, EMPTY_COMMAND_NOTICE)
                return IntentOutcome(error=EMPTY_COMMAND_NOTICE)
            target = target or ALL_TARGETS
            logger.debug("Dispatching command to %s: %s", target, command)
            emitted = self._transport.dispatch_command(target, command)
            if not emitted:
                return IntentOutcome(error=f"Failed to send command to {target}")
            if label:
                self._notify(NoticeLevel.INFO, f"Executing: {label}")
            return IntentOutcome(emitted=True)

    def toggle_stream(self, agent_id: str, enabled: bool) -> StreamSubscription:
        with self._lock:
            subscription = self.streams.toggle(agent_id, enabled)
            self._notify(
                NoticeLevel.INFO,
                f"Screen streaming {'enabled' if enabled else 'disabled'}",
            )
            return subscription

    def report_render_error(self, agent_id: str) -> StreamSubscription:
        with self._lock:
            return self.streams.report_render_error(agent_id)

    def focus(self, agent_id: str) -> FocusSnapshot:
        with self._lock:
            return self.focus_mirror.focus(agent_id)

    def unfocus(self) -> None:
        with self._lock:
            self.focus_mirror.unfocus()

    def clear_history(self, agent_id: str) -> bool:
        """Empty one agent's log; the global log is left alone."""
        with self._lock:
            cleared = self.history.clear_agent(agent_id)
            if cleared:
                self._notify(NoticeLevel.SUCCESS, "History cleared")
            return cleared

    def select_target(self, target: str) -> str:
        """Select a command target, falling back to broadcast for unknown ids."""
        with self._lock:
            if target != ALL_TARGETS and target not in self.registry:
                target = ALL_TARGETS
            self.selected_target = target
            return target

    def load_history(self, backlog: Iterable[Any]) -> int:
        """Apply a bulk-loaded history backlog through the normal upsert path."""
        with self._lock:
            count = 0
            for payload in backlog:
                self.history.record(CommandEvent.from_payload(payload))
                count += 1
            return count

    # Queries

    def resolve_agent(self, prefix: str) -> tuple[str | None, str | None]:
        """Resolve an id prefix to one registered agent, or return an error message."""
        with self._lock:
            if prefix in self.registry:
                return prefix, None
            matches = self.registry.resolve_prefix(prefix)
        if not matches:
            return None, f"No agents matching '{prefix}'"
        if len(matches) > 1:
            return None, f"Prefix '{prefix}' matched multiple agents; use a longer prefix."
        return matches[0], None

    def global_history(self) -> list[CommandEvent]:
        with self._lock:
            return self.history.global_log.entries()

    def agent_history(self, agent_id: str) -> list[CommandEvent]:
        with self._lock:
            log: HistoryLog | None = self.history.agent_log(agent_id)
            return log.entries() if log is not None else []

    def drain_notices(self) -> list[Notice]:
        with self._lock:
            notices = list(self._notices)
            self._notices.clear()
            return notices

    def _notify(self, level: NoticeLevel, text: str) -> None:
        self._notices.append(Notice(level=level, text=text))

    def _label_for(self, agent_id: str) -> str | None:
        agent = self.registry.get(agent_id)
        return agent_label(agent) if agent is not None else None
