"""In-process fan-out notifier."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import AsyncIterator, Deque, Optional, Set

from ..jobs.models import JobEvent
from .base import BaseNotifier

logger = logging.getLogger(__name__)

_CLOSE = object()


class InMemoryNotifier(BaseNotifier):
    """Broadcast events to local subscribers.

    Every subscriber owns a queue; a full queue drops the event for that
    subscriber only. The most recent ``history_size`` events are kept in
    ``history``; 0 disables it.
    """

    def __init__(self, max_queue_size: int = 1000, history_size: int = 1000) -> None:
        self._subscribers: Set[asyncio.Queue] = set()
        self._max_queue_size = max_queue_size
        self.history: Deque[JobEvent] = deque(maxlen=history_size)

    async def publish(self, event: JobEvent) -> None:
        self.history.append(event)
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    f"Dropping {event.type} for job_id={event.job_id}: subscriber queue full"
                )

    async def subscribe(
        self, job_id: Optional[str] = None, lifespan: Optional[float] = None
    ) -> AsyncIterator[JobEvent]:
        """Yield events as they are published.

        Args:
            job_id: Only yield events for this job when given.
            lifespan: Maximum time in seconds to keep listening. If None, runs
                until the notifier is closed.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.add(queue)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + lifespan if lifespan else None
        try:
            while True:
                timeout = None
                if deadline is not None:
                    timeout = deadline - loop.time()
                    if timeout <= 0:
                        break
                try:
                    item = await asyncio.wait_for(queue.get(), timeout)
                except asyncio.TimeoutError:
                    break
                if item is _CLOSE:
                    break
                if job_id is None or item.job_id == job_id:
                    yield item
        finally:
            self._subscribers.discard(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def close(self) -> None:
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(_CLOSE)
            except asyncio.QueueFull:
                logger.warning("Subscriber queue full while closing notifier")
        logger.info("All notifier subscribers closed")
