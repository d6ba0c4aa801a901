"""Redis transport for cross-process event delivery."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Optional, Tuple

import redis.asyncio as redis

from ..contracts import DomainEvent
from .base import BaseTransport

logger = logging.getLogger(__name__)


class RedisTransport(BaseTransport[str]):
    """Redis list acting as a FIFO queue (LPUSH / BRPOP)."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self._redis: Optional[Any] = None

    @staticmethod
    def queue_key(queue: str) -> str:
        return f"courier:{queue}"

    async def connect(self) -> None:
        """Connect to Redis."""
        self._redis = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=True,
        )
        await self._redis.ping()

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def publish(self, queue: str, event: DomainEvent) -> None:
        if not self._redis:
            await self.connect()
        await self._redis.lpush(self.queue_key(queue), event.to_json())

    async def subscribe(
        self, queue: str, lifespan: Optional[float] = None
    ) -> AsyncIterator[Tuple[str, DomainEvent]]:
        if not self._redis:
            await self.connect()

        loop = asyncio.get_running_loop()
        start_time = loop.time() if lifespan else None

        while True:
            if lifespan and start_time is not None:
                if loop.time() - start_time >= lifespan:
                    break

            result = await self._redis.brpop(self.queue_key(queue), timeout=1)
            if not result:
                continue
            _, body = result
            try:
                event = DomainEvent.from_json(body)
            except ValueError as e:
                logger.warning(f"Dropping unreadable event on {queue}: {e}")
                continue
            yield body, event

    async def ack(self, raw_message: str) -> None:
        """No-op acknowledgment for Redis transport (message already consumed)."""
        pass
