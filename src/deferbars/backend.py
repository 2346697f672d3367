"""Future capability consumed by the render pass.

The placeholder protocol needs only three operations from the future
implementation: recognise a pending value, share it so that more than one
consumer can await it, and wait for a set of them with fail-fast
semantics. ``AsyncioBackend`` provides them on top of asyncio; anything
satisfying ``AsyncBackend`` can be passed to ``wrap(backend=...)``.

"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AsyncBackend(Protocol):
    """Minimal future capability."""

    def is_future_like(self, value: Any) -> bool:
        """True if ``value`` is a pending value that must be awaited."""
        ...

    def ensure_future(self, value: Awaitable[Any]) -> Awaitable[Any]:
        """Return an awaitable that may be awaited any number of times."""
        ...

    async def gather(self, futures: Sequence[Awaitable[Any]]) -> list[Any]:
        """Wait for all ``futures``; raise the first failure."""
        ...


class AsyncioBackend:
    """asyncio implementation of ``AsyncBackend``.

    Coroutines are wrapped in tasks on first use. ``gather`` fails as soon
    as one future fails and cancels the ones still pending, so a failed
    render leaves no orphaned helper work behind.
    """

    __slots__ = ()

    def is_future_like(self, value: Any) -> bool:
        return inspect.isawaitable(value)

    def ensure_future(self, value: Awaitable[Any]) -> Awaitable[Any]:
        return asyncio.ensure_future(_flatten(self, value))

    async def gather(self, futures: Sequence[Awaitable[Any]]) -> list[Any]:
        if not futures:
            return []
        try:
            return list(await asyncio.gather(*futures))
        except BaseException:
            for future in futures:
                if isinstance(future, asyncio.Future) and not future.done():
                    future.cancel()
            raise

    def __repr__(self) -> str:
        return "<AsyncioBackend>"


async def _flatten(backend: AsyncBackend, value: Awaitable[Any]) -> Any:
    """Await ``value`` until the result is no longer awaitable."""
    result = await value
    while backend.is_future_like(result):
        result = await result
    return result
