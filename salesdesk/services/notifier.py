"""
In-process change feed.

API handlers publish a ChangeEvent after each committed write. Listeners
either register a plain callback or open a stream (an asyncio.Queue)
that the server-sent events endpoint drains.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from salesdesk.models.base import utcnow

logger = logging.getLogger(__name__)

STREAM_QUEUE_SIZE = 100


@dataclass(frozen=True)
class ChangeEvent:
    table: str  # "leads", "users", "notes", ...
    action: str  # "insert", "update" or "delete"
    record_id: str
    at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, str]:
        data = asdict(self)
        data["at"] = self.at.isoformat()
        return data


class ChangeFeed:
    """Publish/subscribe hub for record changes."""

    def __init__(self, queue_size: int = STREAM_QUEUE_SIZE):
        self._callbacks: List[Callable[[ChangeEvent], None]] = []
        self._streams: List[asyncio.Queue] = []
        self._queue_size = queue_size

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        """
        Register a callback for every published event.

        Returns:
            A function that removes the callback again
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def open_stream(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._streams.append(queue)
        return queue

    def close_stream(self, queue: asyncio.Queue) -> None:
        if queue in self._streams:
            self._streams.remove(queue)

    @property
    def listener_count(self) -> int:
        return len(self._callbacks) + len(self._streams)

    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every callback and open stream."""
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Change listener failed for {event.table}/{event.record_id}: {e}")

        for queue in list(self._streams):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                # Slow client; it will resync on its next full fetch
                logger.warning(f"Change stream full, dropped {event.table}/{event.record_id}")

    def notify(self, table: str, action: str, record_id: Optional[str]) -> ChangeEvent:
        event = ChangeEvent(table=table, action=action, record_id=str(record_id or ""))
        self.publish(event)
        return event


change_feed = ChangeFeed()
