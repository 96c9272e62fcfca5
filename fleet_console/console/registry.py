"""Agent registry rebuilt wholesale from each incoming snapshot."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from .models import AgentSnapshot, RegistryDelta

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Canonical mapping of agent id -> AgentSnapshot.

    Contents always equal the last applied snapshot exactly; there is no merge.
    """

    def __init__(self) -> None:
        self._agents: dict[str, AgentSnapshot] = {}

    def apply_snapshot(self, snapshot: Mapping[str, AgentSnapshot]) -> RegistryDelta:
        """Replace the stored mapping and report which ids appeared or vanished."""
        previous = self._agents
        current = dict(snapshot)
        delta = RegistryDelta(
            added=[agent_id for agent_id in current if agent_id not in previous],
            removed=[agent_id for agent_id in previous if agent_id not in current],
            retained=[agent_id for agent_id in current if agent_id in previous],
        )
        self._agents = current
        if not delta.is_empty:
            logger.debug(
                "Registry updated: +%d -%d (=%d)",
                len(delta.added),
                len(delta.removed),
                len(delta.retained),
            )
        return delta

    def apply_payload(self, payload: Any) -> RegistryDelta:
        """Parse a raw ``client_update`` mapping and apply it as a full snapshot.

        A payload that is not a mapping leaves the registry untouched.
        """
        if not isinstance(payload, Mapping):
            logger.warning("Ignoring malformed registry payload of type %s", type(payload).__name__)
            return RegistryDelta()
        return self.apply_snapshot(
            {
                str(agent_id): AgentSnapshot.from_payload(str(agent_id), entry)
                for agent_id, entry in payload.items()
            }
        )

    def get(self, agent_id: str) -> AgentSnapshot | None:
        return self._agents.get(agent_id)

    def ids(self) -> list[str]:
        return list(self._agents)

    def agents(self) -> list[AgentSnapshot]:
        return list(self._agents.values())

    def resolve_prefix(self, prefix: str) -> list[str]:
        """Return ids starting with ``prefix`` (case-insensitive)."""
        needle = prefix.lower()
        return [agent_id for agent_id in self._agents if agent_id.lower().startswith(needle)]

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._agents))
