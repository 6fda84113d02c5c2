"""SSE Manager: in-process, per-owner event broadcaster for live content updates."""

import asyncio
import json
import logging
from collections import defaultdict
from collections.abc import AsyncGenerator
from typing import Any

logger = logging.getLogger(__name__)

_QUEUE_SIZE = 100


class SSEManager:
    """Manages SSE client connections and pushes content updates to their owner.

    Each connected client gets its own bounded asyncio.Queue, registered under
    its owner id. Clients consume events via an async generator.
    """

    def __init__(self) -> None:
        self._queues: dict[str, list[asyncio.Queue[str | None]]] = defaultdict(list)

    async def subscribe(self, owner_id: str) -> AsyncGenerator[str, None]:
        """Subscribe to one owner's events. Yields formatted SSE strings.

        The generator automatically unsubscribes when the client disconnects.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=_QUEUE_SIZE)
        self._queues[owner_id].append(queue)
        logger.debug("SSE client connected for owner %s", owner_id)
        try:
            yield _format("connected", {"type": "connected"})
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            self._discard(owner_id, queue)

    async def notify(self, owner_id: str, event_type: str, data: dict[str, Any]) -> int:
        """Push an event to every client of one owner.

        Returns:
            Number of clients the event was delivered to.
        """
        sse_message = _format(event_type, data)
        delivered = 0
        for queue in list(self._queues.get(owner_id, [])):
            try:
                queue.put_nowait(sse_message)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("SSE client queue full for owner %s, disconnecting", owner_id)
                self._discard(owner_id, queue)
                _close(queue)
        return delivered

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for queues in self._queues.values():
            for queue in queues:
                _close(queue)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return sum(len(queues) for queues in self._queues.values())

    def _discard(self, owner_id: str, queue: asyncio.Queue[str | None]) -> None:
        queues = self._queues.get(owner_id)
        if queues and queue in queues:
            queues.remove(queue)
            if not queues:
                del self._queues[owner_id]


def _format(event_type: str, data: dict[str, Any]) -> str:
    return f"event: {event_type}\ndata: {json.dumps(data, default=str)}\n\n"


def _close(queue: asyncio.Queue[str | None]) -> None:
    """Wake the consumer with the end-of-stream marker, dropping a backlog if needed."""
    while True:
        try:
            queue.put_nowait(None)
            return
        except asyncio.QueueFull:
            queue.get_nowait()
