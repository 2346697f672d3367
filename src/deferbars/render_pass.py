"""RenderPass — the context-local handle of the pass currently rendering.

Every wrapped helper, partial and block callback asks one question before
doing anything else: *am I running inside the synchronous phase of a render
pass?* The answer lives in a ContextVar holding the current ``RenderPass``.
A pass counts as active only while its ledger is open, which is exactly the
duration of the engine's synchronous render call.

Isolation:
    - Overlapping renders of the same template (two ``asyncio`` tasks) each
      see their own pass, never a process-wide one.
    - A task created *during* the synchronous phase copies the context, and
      with it the pass. By the time that task runs, the ledger is closed,
      so the task is correctly treated as a detached continuation.

"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass

from deferbars.backend import AsyncBackend
from deferbars.codec import PlaceholderCodec
from deferbars.environment.exceptions import NoActiveLedgerError
from deferbars.ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RenderPass:
    """State of one render pass.

    Attributes:
        ledger: Pending values registered during the synchronous phase
        codec: Placeholder encoding shared by the whole environment
    """

    ledger: Ledger
    codec: PlaceholderCodec

    @property
    def backend(self) -> AsyncBackend:
        return self.ledger.backend

    @property
    def active(self) -> bool:
        """True while the synchronous phase is running."""
        return not self.ledger.closed


_render_pass: ContextVar[RenderPass | None] = ContextVar(
    "deferbars_render_pass",
    default=None,
)


def get_render_pass() -> RenderPass | None:
    """Get the active render pass (None if not inside a synchronous phase)."""
    render_pass = _render_pass.get()
    if render_pass is None or not render_pass.active:
        return None
    return render_pass


def get_render_pass_required() -> RenderPass:
    """Get the active render pass, raise if there is none.

    Raises:
        NoActiveLedgerError: If no synchronous phase is running
    """
    render_pass = get_render_pass()
    if render_pass is None:
        raise NoActiveLedgerError()
    return render_pass


@contextmanager
def open_render_pass(backend: AsyncBackend, codec: PlaceholderCodec) -> Iterator[RenderPass]:
    """Run the synchronous phase of a new pass.

    Creates a fresh ledger, makes the pass current for the duration of the
    with block, then closes the ledger and restores the previous pass. The
    body must not await.

    Example:
        with open_render_pass(backend, codec) as render_pass:
            output = render_func(context, helpers=helpers, partials=partials)
        results = await render_pass.ledger.settle()
    """
    render_pass = RenderPass(ledger=Ledger(backend), codec=codec)
    token: Token[RenderPass | None] = _render_pass.set(render_pass)
    logger.debug("ledger #%d: opened", render_pass.ledger.id)
    try:
        yield render_pass
    finally:
        render_pass.ledger.close()
        _render_pass.reset(token)
        logger.debug(
            "ledger #%d: closed with %d pending value(s)",
            render_pass.ledger.id,
            len(render_pass.ledger),
        )
