"""deferbars: async helpers for the synchronous pybars Handlebars engine.

Wherever a helper returns an awaitable, an opaque placeholder is rendered
instead; once pybars has produced its string, the pending values are
awaited together and the placeholders replaced, respecting the escaping
pybars applied to each occurrence.

Quickstart:
    >>> import asyncio
    >>> from deferbars import wrap
    >>> env = wrap()
    >>> async def helper(this, value):
    ...     await asyncio.sleep(0.1)
    ...     return value
    >>> env.register_helper("helper", helper)
    >>> template = env.compile("123{{helper a}}456{{helper b}}")
    >>> asyncio.run(template({"a": "abc", "b": "xyz"}))
    '123abc456xyz'

Limitations:
    - The placeholder character must not occur in templates or data.
    - A synchronous helper that inspects the text of async block content
      sees placeholder tokens, not the final text.

"""

from deferbars.backend import AsyncBackend, AsyncioBackend
from deferbars.codec import DEFAULT_PLACEHOLDER_CHAR, PlaceholderCodec, PlaceholderMatch
from deferbars.environment import (
    AsyncHandlebars,
    CallableRegistry,
    ConfigurationError,
    DeferbarsError,
    ErrorCode,
    LedgerClosedError,
    LedgerError,
    NoActiveLedgerError,
    WrapOptions,
    wrap,
)
from deferbars.guard import CallSiteGuard
from deferbars.ledger import Ledger
from deferbars.orchestrator import run_render_pass
from deferbars.render_pass import RenderPass, get_render_pass, get_render_pass_required
from deferbars.template import AsyncTemplate
from deferbars.values import PlaceholderValue, intercept

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PLACEHOLDER_CHAR",
    "AsyncBackend",
    "AsyncHandlebars",
    "AsyncTemplate",
    "AsyncioBackend",
    "CallSiteGuard",
    "CallableRegistry",
    "ConfigurationError",
    "DeferbarsError",
    "ErrorCode",
    "Ledger",
    "LedgerClosedError",
    "LedgerError",
    "NoActiveLedgerError",
    "PlaceholderCodec",
    "PlaceholderMatch",
    "PlaceholderValue",
    "RenderPass",
    "WrapOptions",
    "get_render_pass",
    "get_render_pass_required",
    "intercept",
    "run_render_pass",
    "wrap",
]
