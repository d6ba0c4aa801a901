from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from ..errors import DependencyUnavailable

T = TypeVar("T")


async def call_with_timeout(
    awaitable: Awaitable[T], timeout: Optional[float], dependency: str
) -> T:
    """Await ``awaitable``, surfacing expiry as ``DependencyUnavailable``.

    ``timeout=None`` waits indefinitely. An expired call may still have
    reached the remote side; it is not retried.
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise DependencyUnavailable(
            dependency, f"no response within {timeout}s", uncertain=True
        ) from exc
