"""Display treatments for console state.

These helpers are UI-agnostic: they produce plain strings and semantic colour
tokens that any rendering layer (the Rich monitor, a web view) can map.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .models import AgentSnapshot, CommandEvent, CommandStatus, StreamStatus, StreamSubscription
from .registry import AgentRegistry

ALL_TARGETS = "all"
ALL_TARGETS_LABEL = "All Clients"
UNKNOWN_AGENT = "UNKNOWN"
PENDING_OUTPUT = "Executing..."

STREAM_STARTING = "Stream starting..."
STREAM_WAITING = "Waiting for screen data..."
STREAM_NO_DATA = "Error: No image data received"
STREAM_RENDER_FAILED = "Error: Failed to load image"
FOCUS_LOADING = "Loading..."


@dataclass(frozen=True)
class StatusTreatment:
    """Icon and semantic colour token for one command status."""

    icon: str
    tone: str  # success | error | warning | accent | muted


STATUS_TREATMENTS: dict[CommandStatus, StatusTreatment] = {
    CommandStatus.SUCCESS: StatusTreatment("✓", "success"),
    CommandStatus.FAILED: StatusTreatment("✗", "error"),
    CommandStatus.QUEUED: StatusTreatment("⏳", "warning"),
    CommandStatus.PENDING: StatusTreatment("⏳", "accent"),
    CommandStatus.UNKNOWN: StatusTreatment("?", "muted"),
}


@dataclass(frozen=True)
class HistoryRow:
    """Render-ready view of one history record."""

    command_id: str
    header: str
    command: str | None
    icon: str
    tone: str
    label: str
    output: str


def short_id(agent_id: str | None) -> str:
    if not agent_id:
        return UNKNOWN_AGENT
    return agent_id[:8].upper()


def format_clock(value: datetime | None) -> str:
    """Local wall-clock ``HH:MM:SS`` for a timestamp."""
    if value is None:
        return "--:--:--"
    return value.astimezone().strftime("%H:%M:%S")


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def status_label(event: CommandEvent) -> str:
    raw = event.raw_status or event.status.value
    return raw[:1].upper() + raw[1:]


def display_output(event: CommandEvent) -> str:
    """Output text shown for a record; pending always shows a placeholder."""
    if event.status is CommandStatus.PENDING:
        return PENDING_OUTPUT
    return event.output


def history_row(event: CommandEvent, *, include_agent: bool = True) -> HistoryRow:
    """Build a row; the per-agent view omits the agent id from the header."""
    treatment = STATUS_TREATMENTS[event.status]
    header = f"[{format_clock(event.timestamp)}]"
    if include_agent:
        header = f"{header} {short_id(event.agent_id)}"
    return HistoryRow(
        command_id=event.command_id,
        header=header,
        command=event.command,
        icon=treatment.icon,
        tone=treatment.tone,
        label=status_label(event),
        output=display_output(event),
    )


def agent_label(agent: AgentSnapshot) -> str:
    return f"{agent.short_id} - {agent.hostname}"


def agent_summary(agent: AgentSnapshot) -> str:
    """Roster line such as ``Online (2 queued)``."""
    state = "Online" if agent.online else "Offline"
    if agent.queued_commands > 0:
        return f"{state} ({agent.queued_commands} queued)"
    return state


def target_options(registry: AgentRegistry) -> list[tuple[str, str]]:
    """Command target choices: broadcast first, then each known agent."""
    options = [(ALL_TARGETS, ALL_TARGETS_LABEL)]
    options.extend((agent.agent_id, agent_label(agent)) for agent in registry.agents())
    return options


def frame_status(timestamp: datetime | None) -> str:
    return f"Last updated: {format_clock(timestamp)}"


def stream_placeholder(subscription: StreamSubscription | None) -> str | None:
    """Placeholder shown in the preview area while an enabled stream has no frame."""
    if subscription is None or not subscription.enabled:
        return None
    if subscription.frame_ready or subscription.status == StreamStatus.ERROR:
        return None
    return STREAM_WAITING
