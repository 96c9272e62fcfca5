"""Monitor command: interactive console for agents, command history and screen streams."""

import logging
import shlex
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from ..config import ConsoleConfig
from ..console.controller import DashboardConsole
from ..console.presenters import (
    ALL_TARGETS,
    agent_summary,
    format_datetime,
    history_row,
    short_id,
    stream_placeholder,
    target_options,
)
from ..console.services.factory import create_console
from ..console.services.socketio_transport import SocketIOTransport
from ..errors import ConsoleUsageError, InvalidTargetError
from ..ui.theme import THEME
from .formatting import _format_history_row, _format_notice, _markup
from .state import app, console

load_dotenv()


class MonitorSession:
    """Encapsulates the command loop for the monitor command."""

    def __init__(
        self,
        dashboard: DashboardConsole,
        transport: SocketIOTransport,
        history_limit: int,
    ) -> None:
        self.dashboard = dashboard
        self.transport = transport
        self.history_limit = history_limit

    def run(self) -> None:
        console.print(
            Panel(
                f"[bold]{_markup('fleet-console monitor', THEME.primary)}[/bold]\n"
                f"Server: {_markup(self.transport.url, THEME.muted)}\n"
                "Type [bold]help[/bold] for commands.",
                border_style=THEME.border,
            )
        )
        self._render_overview()

        while True:
            try:
                raw = input("console> ").strip()
            except (EOFError, KeyboardInterrupt):
                console.print()
                break

            if not raw:
                continue
            if raw in ("quit", "exit", "q"):
                break
            try:
                self._dispatch(raw)
            except ConsoleUsageError as exc:
                console.print(_markup(str(exc), THEME.warning))
            self._print_notices()

    def _dispatch(self, raw: str) -> None:
        if raw in ("help", "h", "?"):
            self._print_help()
            return
        if raw in ("overview", "o"):
            self._render_overview()
            return
        if raw in ("agents", "ls"):
            self._render_agents()
            return
        if raw in ("refresh", "r"):
            if self.dashboard.request_snapshot():
                console.print("[dim]Snapshot requested[/dim]")
            else:
                console.print(_markup("Failed to request snapshot", THEME.error))
            return
        if raw == "unfocus":
            self.dashboard.unfocus()
            console.print("[dim]Focus cleared[/dim]")
            return

        try:
            parts = shlex.split(raw)
        except ValueError as exc:
            console.print(_markup(f"Invalid command syntax: {exc}", THEME.error))
            return
        command = parts[0].lower()

        if command == "history":
            agent_id = self._resolve(parts[1]) if len(parts) > 1 else None
            self._render_history(agent_id)
            return

        if command == "send" and len(parts) > 1:
            target = parts[1] if parts[1] == ALL_TARGETS else self._resolve(parts[1])
            self._send(target, " ".join(parts[2:]))
            return

        if command == "run":
            self._send(self.dashboard.selected_target, " ".join(parts[1:]))
            return

        if command == "target":
            if len(parts) > 1:
                target = parts[1] if parts[1] == ALL_TARGETS else self._resolve(parts[1])
                self.dashboard.select_target(target)
            self._render_targets()
            return

        if command == "stream" and len(parts) > 2 and parts[2] in ("on", "off"):
            agent_id = self._resolve(parts[1], allow_orphan=True)
            subscription = self.dashboard.toggle_stream(agent_id, parts[2] == "on")
            console.print(f"[dim]{short_id(agent_id)}: {subscription.status_message}[/dim]")
            return

        if command == "focus" and len(parts) > 1:
            agent_id = self._resolve(parts[1], allow_orphan=True)
            snapshot = self.dashboard.focus(agent_id)
            has_image = "frame available" if snapshot.image_uri else "no frame yet"
            console.print(
                Panel(
                    f"{_markup(snapshot.status_message, THEME.muted)}\n[dim]{has_image}[/dim]",
                    title=snapshot.title,
                    border_style=THEME.border,
                )
            )
            return

        if command == "clear" and len(parts) > 1:
            agent_id = self._resolve(parts[1])
            if not self.dashboard.clear_history(agent_id):
                console.print(_markup(f"No history for {short_id(agent_id)}", THEME.warning))
            return

        console.print(_markup(f"Unknown command: {raw}", THEME.warning))
        console.print("[dim]Type 'help' for command list[/dim]")

    def _resolve(self, prefix: str, *, allow_orphan: bool = False) -> str:
        agent_id, error = self.dashboard.resolve_agent(prefix)
        if agent_id is not None:
            return agent_id
        if allow_orphan and prefix in self.dashboard.streams:
            return prefix
        raise InvalidTargetError(error or prefix)

    def _send(self, target: str, text: str) -> None:
        outcome = self.dashboard.send_command(target, text)
        if outcome.ok:
            label = "all clients" if target == ALL_TARGETS else short_id(target)
            console.print(_markup(f"command sent to {label}", THEME.success))
        elif outcome.error and text.strip():
            console.print(_markup(outcome.error, THEME.error))

    def _print_notices(self) -> None:
        for notice in self.dashboard.drain_notices():
            console.print(_format_notice(notice))

    def _print_help(self) -> None:
        console.print(_markup("Commands:", THEME.secondary))
        console.print("[dim]  overview                          agents + recent command history[/dim]")
        console.print("[dim]  agents                            list registered agents[/dim]")
        console.print(r"[dim]  history \[prefix]                  global or per-agent command history[/dim]")
        console.print("[dim]  send <prefix|all> <text>          dispatch a command[/dim]")
        console.print(r"[dim]  target \[prefix|all]               show or select the default target[/dim]")
        console.print("[dim]  run <text>                        dispatch to the selected target[/dim]")
        console.print("[dim]  stream <prefix> on|off            toggle live screen preview[/dim]")
        console.print("[dim]  focus <prefix>                    inspect one agent's preview[/dim]")
        console.print("[dim]  unfocus                           close the inspected preview[/dim]")
        console.print("[dim]  clear <prefix>                    clear one agent's history[/dim]")
        console.print("[dim]  refresh                           request a fresh snapshot[/dim]")
        console.print("[dim]  help                              show this help[/dim]")
        console.print("[dim]  quit                              exit monitor[/dim]")

    def _render_agents(self) -> None:
        agents = self.dashboard.registry.agents()
        if not agents:
            console.print("[dim]No clients connected[/dim]")
            return
        table = Table(show_header=True, header_style=THEME.secondary)
        table.add_column("Agent", style=THEME.accent)
        table.add_column("State")
        table.add_column("Hostname")
        table.add_column("IP", style=THEME.muted)
        table.add_column("OS", style=THEME.muted)
        table.add_column("Last Seen", style=THEME.muted)
        table.add_column("Stream")
        for agent in agents:
            color = THEME.online if agent.online else THEME.offline
            subscription = self.dashboard.streams.get(agent.agent_id)
            stream = "-"
            if subscription is not None and subscription.enabled:
                stream = stream_placeholder(subscription) or subscription.status_message
            table.add_row(
                agent.short_id,
                _markup(agent_summary(agent), color),
                agent.hostname,
                agent.ip,
                agent.os,
                format_datetime(agent.last_seen),
                stream,
            )
        console.print(table)

    def _render_history(self, agent_id: str | None = None) -> None:
        if agent_id is None:
            events = self.dashboard.global_history()
        else:
            events = self.dashboard.agent_history(agent_id)
        if not events:
            console.print("[dim]No commands yet[/dim]")
            return
        for event in events[: self.history_limit]:
            console.print(_format_history_row(history_row(event, include_agent=agent_id is None)))

    def _render_targets(self) -> None:
        selected = self.dashboard.selected_target
        for value, label in target_options(self.dashboard.registry):
            marker = "*" if value == selected else " "
            console.print(f"{marker} {escape(label)}")

    def _render_overview(self) -> None:
        console.print(_markup("Agents", THEME.secondary))
        self._render_agents()
        console.print()
        console.print(_markup("Recent commands", THEME.secondary))
        self._render_history()


@app.command()
def monitor(
    url: Annotated[
        Optional[str],
        typer.Option("--url", help="Dashboard server URL"),
    ] = None,
    config_path: Annotated[
        Optional[str],
        typer.Option("--config", help="Path to console YAML config"),
    ] = None,
    history: Annotated[
        int,
        typer.Option("--history", "-n", help="Number of history rows to show"),
    ] = 20,
) -> None:
    """Interactive console for live agents, command history and screen streams."""
    try:
        config = ConsoleConfig.load(config_path=config_path, server_url=url)
    except (FileNotFoundError, ConsoleUsageError) as exc:
        console.print(_markup(str(exc), THEME.error))
        raise typer.Exit(1) from exc

    logging.basicConfig(level=getattr(logging, config.log_level, logging.WARNING))

    dashboard, transport = create_console(config)
    try:
        transport.connect()
    except SocketIOConnectionError as exc:
        console.print(_markup(f"Failed to connect to {config.server_url}: {exc}", THEME.error))
        raise typer.Exit(1) from exc

    try:
        MonitorSession(dashboard, transport, history_limit=history).run()
    finally:
        transport.disconnect()
