"""Mirror of the single agent stream under close inspection."""

from __future__ import annotations

from collections.abc import Callable

from .models import FocusSnapshot, StreamSubscription
from .presenters import FOCUS_LOADING
from .streams import StreamSubscriptionManager

UNKNOWN_CLIENT = "Unknown Client"


class FocusMirror:
    """Tracks at most one focused agent and mirrors its frames.

    The mirror reads subscription state; it never owns or copies the
    subscription table.
    """

    def __init__(
        self,
        streams: StreamSubscriptionManager,
        label_for: Callable[[str], str | None] | None = None,
    ) -> None:
        self._streams = streams
        self._label_for = label_for
        self._target: str | None = None
        self._snapshot: FocusSnapshot | None = None

    @property
    def target(self) -> str | None:
        return self._target

    @property
    def snapshot(self) -> FocusSnapshot | None:
        return self._snapshot

    def focus(self, agent_id: str) -> FocusSnapshot:
        """Focus ``agent_id`` and return whatever is known for it, stale or not."""
        self._target = agent_id
        subscription = self._streams.get(agent_id)
        image_uri = None
        status = FOCUS_LOADING
        if subscription is not None:
            if subscription.last_frame is not None:
                image_uri = subscription.last_frame.data_uri
            status = subscription.status_message or FOCUS_LOADING
        self._snapshot = FocusSnapshot(
            agent_id=agent_id,
            title=f"{self._title(agent_id)} - Screen Preview",
            image_uri=image_uri,
            status_message=status,
        )
        return self._snapshot

    def unfocus(self) -> None:
        self._target = None
        self._snapshot = None

    def on_frame(self, agent_id: str, subscription: StreamSubscription) -> bool:
        """Refresh the mirror after the stream manager handled a frame.

        Returns ``True`` when the mirrored snapshot changed. Error frames leave
        the mirror untouched.
        """
        if self._target is None or agent_id != self._target or self._snapshot is None:
            return False
        if not subscription.frame_ready or subscription.last_frame is None:
            return False
        self._snapshot = FocusSnapshot(
            agent_id=agent_id,
            title=self._snapshot.title,
            image_uri=subscription.last_frame.data_uri,
            status_message=subscription.status_message,
        )
        return True

    def _title(self, agent_id: str) -> str:
        if self._label_for is None:
            return UNKNOWN_CLIENT
        return self._label_for(agent_id) or UNKNOWN_CLIENT
