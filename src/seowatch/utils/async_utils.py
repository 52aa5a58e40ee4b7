"""Async utility functions and helpers."""

import asyncio
from collections.abc import Awaitable
from typing import Optional, TypeVar

from .logging import get_structured_logger

logger = get_structured_logger(__name__)

T = TypeVar("T")


class AsyncContextManager:
    """Base class for async context managers."""

    async def __aenter__(self):
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    async def setup(self) -> None:
        """Setup the context manager."""
        pass

    async def cleanup(self) -> None:
        """Cleanup the context manager."""
        pass


async def gather_settled(
    *coroutines: Awaitable[T],
) -> list[tuple[Optional[T], Optional[BaseException]]]:
    """Run coroutines concurrently and pair each result with its exception."""
    results = await asyncio.gather(*coroutines, return_exceptions=True)

    settled: list[tuple[Optional[T], Optional[BaseException]]] = []
    for result in results:
        if isinstance(result, BaseException):
            logger.debug("Coroutine failed", error=str(result))
            settled.append((None, result))
        else:
            settled.append((result, None))

    return settled
