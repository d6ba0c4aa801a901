"""In-memory transport for testing."""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from typing import AsyncIterator, Deque, Dict, List, Optional, Tuple

from ..contracts import DomainEvent
from .base import BaseTransport


class InMemoryTransport(BaseTransport[Tuple[str, DomainEvent]]):
    """Simple in-process queue for unit tests."""

    def __init__(self) -> None:
        self._queues: Dict[str, Deque[Tuple[str, DomainEvent]]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def publish(self, queue: str, event: DomainEvent) -> None:
        """Publish event to in-memory queue."""
        raw = (event.to_json(), event)
        async with self._lock:
            self._queues[queue].append(raw)

    def pending(self, queue: str) -> List[DomainEvent]:
        """Return events waiting on ``queue`` without consuming them."""
        return [event for _, event in self._queues[queue]]

    async def subscribe(
        self, queue: str, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[Tuple[str, DomainEvent], DomainEvent]]:
        """Consume events from queue.

        Args:
            queue: The queue to consume from
            lifespan: Maximum time in seconds to keep connection open. If None, runs indefinitely.
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time() if lifespan else None

        while True:
            if lifespan and start_time is not None:
                if loop.time() - start_time >= lifespan:
                    break

            async with self._lock:
                raw_message = (
                    self._queues[queue].popleft() if self._queues[queue] else None
                )
            if raw_message is not None:
                yield raw_message, raw_message[1]
                continue

            await asyncio.sleep(0.1)

    async def ack(self, raw_message: Tuple[str, DomainEvent]) -> None:
        """No-op acknowledgment for in-memory transport."""
        pass
