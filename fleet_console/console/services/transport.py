"""Transport protocol for outbound console emissions."""

from __future__ import annotations

from typing import Protocol


class ConsoleTransport(Protocol):
    """Fire-and-forget channel to the dashboard server.

    Every method returns ``True`` when the emission was handed to the wire.
    Replies, if any, arrive later as independent inbound events.
    """

    def request_snapshot(self) -> bool: ...

    def subscribe_stream(self, agent_id: str) -> bool: ...

    def unsubscribe_stream(self, agent_id: str) -> bool: ...

    def dispatch_command(self, target: str, command: str) -> bool: ...
