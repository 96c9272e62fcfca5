"""Per-agent live screen subscriptions, decoupled from the agent registry."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .models import MediaFrame, StreamStatus, StreamSubscription
from .presenters import STREAM_NO_DATA, STREAM_RENDER_FAILED, STREAM_STARTING, frame_status
from .services.transport import ConsoleTransport

logger = logging.getLogger(__name__)


class StreamSubscriptionManager:
    """Owns the subscription table and the last frame received per agent.

    Frames and toggles for ids unknown to the registry are valid; such
    subscriptions linger until toggled off or discarded.
    """

    def __init__(self, transport: ConsoleTransport) -> None:
        self._transport = transport
        self._subscriptions: dict[str, StreamSubscription] = {}

    def toggle(self, agent_id: str, enabled: bool) -> StreamSubscription:
        subscription = self._ensure(agent_id)
        subscription.enabled = enabled
        subscription.updated_at = datetime.now(timezone.utc)
        if enabled:
            subscription.status = StreamStatus.STARTING
            subscription.status_message = STREAM_STARTING
            subscription.frame_ready = False
            sent = self._transport.subscribe_stream(agent_id)
        else:
            sent = self._transport.unsubscribe_stream(agent_id)
        logger.debug(
            "%s screen stream for %s (sent=%s)",
            "Enabling" if enabled else "Disabling",
            agent_id,
            sent,
        )
        return subscription

    def on_frame(self, agent_id: str, frame: MediaFrame | None) -> StreamSubscription:
        """Store a frame regardless of the enabled flag; in-flight frames race toggles."""
        subscription = self._ensure(agent_id)
        now = datetime.now(timezone.utc)
        subscription.updated_at = now
        if frame is None or frame.is_empty:
            logger.warning("No image data received for %s", agent_id)
            subscription.status = StreamStatus.ERROR
            subscription.status_message = STREAM_NO_DATA
            return subscription

        logger.debug("Received screen frame for %s, data length: %d", agent_id, len(frame.image))
        subscription.last_frame = frame
        subscription.frame_ready = True
        subscription.status = StreamStatus.LIVE
        subscription.status_message = frame_status(frame.timestamp or now)
        return subscription

    def report_render_error(self, agent_id: str) -> StreamSubscription:
        """Mark a frame that arrived but could not be decoded by the renderer."""
        subscription = self._ensure(agent_id)
        logger.warning("Failed to load image for %s", agent_id)
        subscription.status = StreamStatus.ERROR
        subscription.status_message = STREAM_RENDER_FAILED
        return subscription

    def get(self, agent_id: str) -> StreamSubscription | None:
        return self._subscriptions.get(agent_id)

    def is_enabled(self, agent_id: str) -> bool:
        subscription = self._subscriptions.get(agent_id)
        return subscription is not None and subscription.enabled

    def enabled_ids(self) -> list[str]:
        return [agent_id for agent_id, sub in self._subscriptions.items() if sub.enabled]

    def discard(self, agent_id: str) -> StreamSubscription | None:
        return self._subscriptions.pop(agent_id, None)

    def _ensure(self, agent_id: str) -> StreamSubscription:
        subscription = self._subscriptions.get(agent_id)
        if subscription is None:
            subscription = StreamSubscription(agent_id=agent_id)
            self._subscriptions[agent_id] = subscription
        return subscription

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)
