"""Transport adapters for the dashboard console."""

from .socketio_transport import SocketIOTransport
from .transport import ConsoleTransport

__all__ = ["ConsoleTransport", "SocketIOTransport"]
