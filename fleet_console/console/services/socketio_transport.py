"""Socket.IO client transport for the dashboard console."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import socketio
from socketio.exceptions import SocketIOError

logger = logging.getLogger(__name__)

INBOUND_EVENTS = ("client_update", "command_response", "screen_frame")


class InboundSink(Protocol):
    """Anything that accepts named inbound events (the console)."""

    def handle(self, event: str, payload: Any = None) -> Any: ...


class SocketIOTransport:
    """ConsoleTransport over a python-socketio client.

    Outbound methods emit and return immediately; emission failures are
    logged and reported as ``False`` rather than raised.
    """

    def __init__(
        self,
        url: str,
        *,
        socketio_path: str = "socket.io",
        reconnection: bool = True,
        client: Any | None = None,
    ) -> None:
        self.url = url
        self.socketio_path = socketio_path
        self._client = client if client is not None else socketio.Client(reconnection=reconnection)

    def bind(self, sink: InboundSink) -> None:
        """Forward connection lifecycle and inbound data events to ``sink``."""

        def _on_connect(*_args: Any) -> None:
            sink.handle("connect")

        def _on_disconnect(*_args: Any) -> None:
            sink.handle("disconnect")

        self._client.on("connect", _on_connect)
        self._client.on("disconnect", _on_disconnect)
        for event in INBOUND_EVENTS:
            self._client.on(event, self._forwarder(sink, event))

    @staticmethod
    def _forwarder(sink: InboundSink, event: str):
        def _forward(payload: Any = None) -> None:
            sink.handle(event, payload)

        return _forward

    def connect(self, *, wait_timeout: float = 5.0) -> None:
        """Open the connection; raises ``socketio.exceptions.ConnectionError`` on failure."""
        logger.info("Connecting to %s", self.url)
        self._client.connect(
            self.url,
            socketio_path=self.socketio_path,
            wait_timeout=wait_timeout,
        )

    def disconnect(self) -> None:
        if self.connected:
            self._client.disconnect()

    @property
    def connected(self) -> bool:
        return bool(getattr(self._client, "connected", False))

    def request_snapshot(self) -> bool:
        return self._emit("get_clients")

    def subscribe_stream(self, agent_id: str) -> bool:
        return self._emit("toggle_screen_stream", {"client_id": agent_id, "enabled": True})

    def unsubscribe_stream(self, agent_id: str) -> bool:
        return self._emit("toggle_screen_stream", {"client_id": agent_id, "enabled": False})

    def dispatch_command(self, target: str, command: str) -> bool:
        return self._emit("send_command", {"target": target, "command": command})

    def _emit(self, event: str, data: dict[str, Any] | None = None) -> bool:
        try:
            if data is None:
                self._client.emit(event)
            else:
                self._client.emit(event, data)
        except SocketIOError as exc:
            logger.warning("Failed to emit %s: %s", event, exc)
            return False
        logger.debug("Emitted %s", event)
        return True
