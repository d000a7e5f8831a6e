"""
Listener registry: the station's event channel.

Events are NOT stored. Each publish is fanned out to the listeners connected
at that moment through a bounded per-listener queue; a listener that joins
mid-cycle only sees what comes after. A listener whose queue overflows is
dropped rather than allowed to stall the station.
"""

from __future__ import annotations

import asyncio
import uuid

from ..infra.logging import get_logger
from ..shared.events import StationEvent

logger = get_logger(__name__)

DEFAULT_QUEUE_SIZE = 200


class Listener:
    """One connected subscriber and its pending outbound messages."""

    def __init__(self, listener_id: str, max_queue: int = DEFAULT_QUEUE_SIZE):
        self.listener_id = listener_id
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_queue)

    async def next_message(self) -> str:
        return await self.queue.get()

    def __repr__(self) -> str:
        return f"Listener({self.listener_id!r}, pending={self.queue.qsize()})"


class ListenerRegistry:
    """Subscriber set implementing the EventPublisher protocol."""

    def __init__(self, max_queue: int = DEFAULT_QUEUE_SIZE):
        self.max_queue = max_queue
        self._listeners: dict[str, Listener] = {}
        self.published_count = 0

    @property
    def count(self) -> int:
        return len(self._listeners)

    def listeners(self) -> list[Listener]:
        return list(self._listeners.values())

    def connect(self, listener_id: str | None = None) -> Listener:
        listener = Listener(listener_id or uuid.uuid4().hex, self.max_queue)
        self._listeners[listener.listener_id] = listener
        logger.info("listener_connected", listener_id=listener.listener_id, listeners=self.count)
        return listener

    def disconnect(self, listener_id: str) -> None:
        if self._listeners.pop(listener_id, None) is not None:
            logger.info("listener_disconnected", listener_id=listener_id, listeners=self.count)

    async def publish(self, event: StationEvent) -> None:
        """Deliver event at most once to each currently connected listener."""
        message = event.to_json()
        self.published_count += 1
        dropped = []
        for listener_id, listener in self._listeners.items():
            try:
                listener.queue.put_nowait(message)
            except asyncio.QueueFull:
                dropped.append(listener_id)
        for listener_id in dropped:
            self._listeners.pop(listener_id, None)
            logger.warning("listener_dropped_queue_full", listener_id=listener_id)
        logger.debug("event_published", kind=event.kind.value, listeners=self.count)
