"""Console state engine: registry, history logs, screen streams and focus."""

from .controller import DashboardConsole
from .focus import FocusMirror
from .history import AGENT_HISTORY_LIMIT, GLOBAL_HISTORY_LIMIT, HistoryBook, HistoryLog
from .models import (
    AgentSnapshot,
    CommandEvent,
    CommandStatus,
    FocusSnapshot,
    IntentOutcome,
    MediaFrame,
    Notice,
    NoticeLevel,
    RegistryDelta,
    StreamStatus,
    StreamSubscription,
    UpsertResult,
)
from .registry import AgentRegistry
from .streams import StreamSubscriptionManager

__all__ = [
    "AGENT_HISTORY_LIMIT",
    "GLOBAL_HISTORY_LIMIT",
    "AgentRegistry",
    "AgentSnapshot",
    "CommandEvent",
    "CommandStatus",
    "DashboardConsole",
    "FocusMirror",
    "FocusSnapshot",
    "HistoryBook",
    "HistoryLog",
    "IntentOutcome",
    "MediaFrame",
    "Notice",
    "NoticeLevel",
    "RegistryDelta",
    "StreamStatus",
    "StreamSubscription",
    "StreamSubscriptionManager",
    "UpsertResult",
]
