"""
Single-flight execution.

At most one in-progress call per key; concurrent callers with the same
key await the first call's outcome (result or exception) instead of
starting their own.

Usage:
    flights = SingleFlight()
    component = await flights.do("ude|doc-1", lambda: load("doc-1"))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Deduplicates concurrent calls by key."""

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Future[Any]] = {}

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``fn`` unless a call for ``key`` is already in flight.

        Args:
            key: Deduplication key
            fn: Zero-argument coroutine factory

        Returns:
            The shared result
        """
        future = self._calls.get(key)
        if future is not None:
            logger.debug(f"[singleflight] Joining in-flight call: {key}")
            return await asyncio.shield(future)

        future = asyncio.get_running_loop().create_future()
        self._calls[key] = future
        try:
            result = await fn()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # mark retrieved so an unjoined failure is not reported at GC
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._calls.pop(key, None)

    def in_flight(self, key: str) -> bool:
        return key in self._calls

    def __len__(self) -> int:
        return len(self._calls)
