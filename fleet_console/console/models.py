"""Shared models for the console registry, history logs and live screen feeds."""

from __future__ import annotations

import base64
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

# Epoch values above this are treated as milliseconds.
_EPOCH_MS_THRESHOLD = 1e11


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch number into an aware datetime.

    Returns ``None`` for anything that cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(slots=True, frozen=True)
class AgentSnapshot:
    """One agent as reported by the most recent registry snapshot."""

    agent_id: str
    hostname: str = ""
    ip: str = ""
    os: str = ""
    online: bool = False
    last_seen: datetime | None = None
    queued_commands: int = 0

    @property
    def short_id(self) -> str:
        return self.agent_id[:8].upper()

    @classmethod
    def from_payload(cls, agent_id: str, payload: Any) -> AgentSnapshot:
        """Build a snapshot from a raw registry entry, defaulting missing fields."""
        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
        queued = data.get("queued_commands")
        try:
            queued_count = len(queued) if queued else 0
        except TypeError:
            queued_count = 0
        return cls(
            agent_id=str(agent_id),
            hostname=_text(data.get("hostname")),
            ip=_text(data.get("ip")),
            os=_text(data.get("os")),
            online=bool(data.get("online", False)),
            last_seen=parse_timestamp(data.get("last_seen")),
            queued_commands=queued_count,
        )


@dataclass(slots=True)
class RegistryDelta:
    """Key-level difference between two consecutive registry snapshots."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    retained: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


class CommandStatus(StrEnum):
    """Lifecycle status of a dispatched command."""

    PENDING = "pending"
    QUEUED = "queued"
    SUCCESS = "success"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> CommandStatus:
        try:
            return cls(_text(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(slots=True, frozen=True)
class CommandEvent:
    """A single command lifecycle push.

    ``command_id`` is stable across the pending -> success/failed transition.
    ``raw_status`` keeps the status text as received so unrecognized kinds can
    still be labelled.
    """

    command_id: str
    status: CommandStatus
    raw_status: str = ""
    agent_id: str | None = None
    command: str | None = None
    output: str = ""
    timestamp: datetime | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> CommandEvent:
        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
        command_id = data.get("id")
        if command_id is None or command_id == "":
            command_id = f"anon-{uuid.uuid4().hex}"
        raw_status = _text(data.get("status")) or CommandStatus.UNKNOWN.value
        agent_id = data.get("client_id")
        command = data.get("command")
        return cls(
            command_id=str(command_id),
            status=CommandStatus.parse(raw_status),
            raw_status=raw_status,
            agent_id=str(agent_id) if agent_id else None,
            command=_text(command) if command else None,
            output=_text(data.get("output")),
            timestamp=parse_timestamp(data.get("timestamp")),
        )


class UpsertResult(StrEnum):
    """Outcome of applying a command event to a history log."""

    INSERTED = "inserted"
    UPDATED = "updated"
    STALE = "stale"


@dataclass(slots=True, frozen=True)
class MediaFrame:
    """One screen-preview frame; ``image`` is base64 JPEG text."""

    agent_id: str
    image: str
    timestamp: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return not self.image

    @property
    def data_uri(self) -> str:
        return f"data:image/jpeg;base64,{self.image}"

    def decode(self) -> bytes:
        return base64.b64decode(self.image)

    @classmethod
    def from_payload(cls, payload: Any) -> MediaFrame:
        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
        return cls(
            agent_id=_text(data.get("client_id")),
            image=_text(data.get("image")),
            timestamp=parse_timestamp(data.get("timestamp")),
        )


class StreamStatus(StrEnum):
    """Display state of a per-agent screen subscription."""

    IDLE = "idle"
    STARTING = "starting"
    LIVE = "live"
    ERROR = "error"


@dataclass(slots=True)
class StreamSubscription:
    """Per-agent opt-in to the live screen feed.

    ``frame_ready`` is the display flag; ``last_frame`` survives toggles.
    """

    agent_id: str
    enabled: bool = False
    last_frame: MediaFrame | None = None
    frame_ready: bool = False
    status: StreamStatus = StreamStatus.IDLE
    status_message: str = ""
    updated_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class FocusSnapshot:
    """What the enlarged preview shows for the focused agent."""

    agent_id: str
    title: str
    image_uri: str | None
    status_message: str


class NoticeLevel(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Notice:
    """Transient message for the rendering layer (toast/status line)."""

    level: NoticeLevel
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True)
class IntentOutcome:
    """Result of applying a local intent."""

    emitted: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.emitted
