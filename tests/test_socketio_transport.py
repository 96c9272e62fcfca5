from __future__ import annotations

from typing import Any

from socketio.exceptions import BadNamespaceError

from fleet_console.console.controller import DashboardConsole
from fleet_console.console.services.socketio_transport import SocketIOTransport


class FakeSocketClient:
    def __init__(self, *, fail_emit: bool = False) -> None:
        self.handlers: dict[str, Any] = {}
        self.emitted: list[tuple[str, Any]] = []
        self.connected = False
        self.connect_calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_emit = fail_emit

    def on(self, event: str, handler: Any) -> None:
        self.handlers[event] = handler

    def emit(self, event: str, data: Any = None) -> None:
        if self.fail_emit:
            raise BadNamespaceError("/ is not a connected namespace.")
        self.emitted.append((event, data))

    def connect(self, url: str, **kwargs: Any) -> None:
        self.connect_calls.append((url, kwargs))
        self.connected = True

    def disconnect(self) -> None:
        self.connected = False


def test_outbound_emissions_use_dashboard_event_names() -> None:
    client = FakeSocketClient()
    transport = SocketIOTransport("http://dash:5000", client=client)

    assert transport.request_snapshot()
    assert transport.subscribe_stream("aaa")
    assert transport.unsubscribe_stream("aaa")
    assert transport.dispatch_command("all", "uptime")

    assert client.emitted == [
        ("get_clients", None),
        ("toggle_screen_stream", {"client_id": "aaa", "enabled": True}),
        ("toggle_screen_stream", {"client_id": "aaa", "enabled": False}),
        ("send_command", {"target": "all", "command": "uptime"}),
    ]


def test_emit_failure_is_reported_not_raised() -> None:
    transport = SocketIOTransport("http://dash:5000", client=FakeSocketClient(fail_emit=True))

    assert transport.request_snapshot() is False
    assert transport.dispatch_command("aaa", "uptime") is False


def test_bind_forwards_inbound_events_to_console() -> None:
    client = FakeSocketClient()
    transport = SocketIOTransport("http://dash:5000", client=client)
    console = DashboardConsole(transport)
    transport.bind(console)

    client.handlers["connect"]()
    client.handlers["client_update"]({"aaa": {"hostname": "web", "online": True}})
    client.handlers["command_response"]({"id": "1", "client_id": "aaa", "status": "success"})
    client.handlers["screen_frame"]({"client_id": "aaa", "image": "aGk="})
    client.handlers["disconnect"]("transport close")

    assert client.emitted == [("get_clients", None)]
    assert "aaa" in console.registry
    assert [e.command_id for e in console.agent_history("aaa")] == ["1"]
    assert console.streams.get("aaa").last_frame is not None
    assert console.connected is False


def test_connect_and_disconnect_delegate_to_client() -> None:
    client = FakeSocketClient()
    transport = SocketIOTransport("http://dash:5000", socketio_path="ws", client=client)

    transport.connect(wait_timeout=1.0)
    assert transport.connected
    assert client.connect_calls == [("http://dash:5000", {"socketio_path": "ws", "wait_timeout": 1.0})]

    transport.disconnect()
    assert not transport.connected
