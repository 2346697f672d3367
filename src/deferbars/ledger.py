"""Ledger of the in-flight results of one render pass.

A ledger is an append-only list: the index of an entry is its insertion
position and is what the placeholder token encodes. The ledger stays open
for exactly the synchronous phase of its render pass; afterwards it only
hands out (shared) futures for its entries.

Lifecycle:
    ```
    open ──register()*──▶ closed ──settle()──▶ resolved values by index
    ```

"""

from __future__ import annotations

import inspect
import itertools
import logging
from collections.abc import Awaitable
from typing import Any

from deferbars.backend import AsyncBackend
from deferbars.environment.exceptions import LedgerClosedError

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


class Ledger:
    """Ordered collection of pending values for one render pass.

    Attributes:
        id: Process-unique number, for logs and error messages
        backend: Future capability used to share and await entries
    """

    __slots__ = ("_closed", "_entries", "_futures", "backend", "id")

    def __init__(self, backend: AsyncBackend):
        self.id = next(_ids)
        self.backend = backend
        self._entries: list[Awaitable[Any]] = []
        self._futures: dict[int, Awaitable[Any]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once the owning pass has left its synchronous phase."""
        return self._closed

    def register(self, value: Awaitable[Any]) -> int:
        """Append a pending value and return its index.

        Raises:
            LedgerClosedError: If the synchronous phase already ended
        """
        if self._closed:
            raise LedgerClosedError(self.id)
        self._entries.append(value)
        return len(self._entries) - 1

    def close(self) -> None:
        self._closed = True

    def discard(self) -> None:
        """Close the ledger and drop every entry without awaiting it.

        Used when the synchronous phase fails: coroutines are closed, and
        futures and tasks are cancelled.
        """
        self._closed = True
        for index, entry in enumerate(self._entries):
            entry = self._futures.get(index, entry)
            if inspect.iscoroutine(entry):
                entry.close()
            elif callable(getattr(entry, "cancel", None)):
                entry.cancel()
        logger.debug("ledger #%d: discarded %d pending value(s)", self.id, len(self._entries))

    def future(self, index: int) -> Awaitable[Any]:
        """Shared awaitable for entry ``index``.

        Coroutines can only be awaited once, but an entry may be awaited by
        settlement and by every deferred helper that received it as an
        argument; the backend wraps it on first use.
        """
        future = self._futures.get(index)
        if future is None:
            future = self.backend.ensure_future(self._entries[index])
            self._futures[index] = future
        return future

    async def settle(self) -> list[Any]:
        """Wait for every entry; the result list is indexed like the ledger.

        All futures are created before any of them is awaited so that the
        entries run concurrently. Fails as soon as one entry fails.
        """
        futures = [self.future(i) for i in range(len(self._entries))]
        logger.debug("ledger #%d: settling %d pending value(s)", self.id, len(futures))
        return await self.backend.gather(futures)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Ledger #{self.id} {state} entries={len(self._entries)}>"
