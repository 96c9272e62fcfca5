"""Factory for wiring a console to its Socket.IO transport."""

from __future__ import annotations

from fleet_console.config import ConsoleConfig

from ..controller import DashboardConsole
from .socketio_transport import SocketIOTransport


def create_console(config: ConsoleConfig) -> tuple[DashboardConsole, SocketIOTransport]:
    """Build a console bound to a not-yet-connected transport for ``config``."""
    transport = SocketIOTransport(
        config.server_url,
        socketio_path=config.socketio_path,
        reconnection=config.reconnection,
    )
    console = DashboardConsole(
        transport,
        global_history_limit=config.global_history_limit,
        agent_history_limit=config.agent_history_limit,
        ignore_stale_updates=config.ignore_stale_updates,
        notice_limit=config.notice_limit,
    )
    transport.bind(console)
    return console, transport
