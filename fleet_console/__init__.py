"""fleet-console: live state console for a multi-agent control dashboard."""

__version__ = "0.1.0"

from .config import ConsoleConfig
from .console import (
    AgentRegistry,
    AgentSnapshot,
    CommandEvent,
    CommandStatus,
    DashboardConsole,
    FocusMirror,
    HistoryBook,
    HistoryLog,
    MediaFrame,
    RegistryDelta,
    StreamSubscriptionManager,
)
from .console.services import ConsoleTransport, SocketIOTransport
from .console.services.factory import create_console

__all__ = [
    "__version__",
    "AgentRegistry",
    "AgentSnapshot",
    "CommandEvent",
    "CommandStatus",
    "ConsoleConfig",
    "ConsoleTransport",
    "DashboardConsole",
    "FocusMirror",
    "HistoryBook",
    "HistoryLog",
    "MediaFrame",
    "RegistryDelta",
    "SocketIOTransport",
    "StreamSubscriptionManager",
    "create_console",
]
