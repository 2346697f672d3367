"""Call-site guard: synchronous pass-through or detached render.

Every place pybars calls back into user code (helpers, subexpressions,
``options['fn']`` / ``options['inverse']``, partials, built-ins) is wrapped.
With an active pass the call is direct and its result is intercepted into
the same ledger. Without one, the call comes from an async continuation and
runs in a pass of its own, returning an awaitable.

A helper or partial receiving placeholder arguments is deferred: the
arguments are awaited first, then it runs detached with the real values.

"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pybars._compiler import Scope, _pybars_

from deferbars.backend import AsyncBackend
from deferbars.codec import PlaceholderCodec
from deferbars.orchestrator import run_render_pass
from deferbars.render_pass import get_render_pass
from deferbars.values import has_placeholders, intercept, resolve_arguments

logger = logging.getLogger(__name__)

_GUARDED = "__deferbars_guarded__"


def is_guarded(func: Callable[..., Any]) -> bool:
    """True if ``func`` was produced by ``CallSiteGuard``."""
    return getattr(func, _GUARDED, False)


def _is_block_options(value: Any) -> bool:
    return isinstance(value, dict) and "inverse" in value and callable(value.get("fn"))


def _scope_has_placeholders(scope: Any) -> bool:
    if isinstance(scope, Scope):
        return has_placeholders((scope.context,), scope.overrides or {})
    return has_placeholders((scope,), {})


class CallSiteGuard:
    """Wraps engine call sites for one environment.

    Attributes:
        backend: Future capability for passes opened by detached calls
        codec: Placeholder encoding shared with the environment
    """

    __slots__ = ("backend", "codec")

    def __init__(self, backend: AsyncBackend, codec: PlaceholderCodec):
        self.backend = backend
        self.codec = codec

    def call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Invoke ``func`` according to the guard rule."""
        if get_render_pass() is not None:
            return intercept(func(*args, **kwargs))
        return self.detached(func, *args, **kwargs)

    def detached(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Awaitable[Any]:
        """Run ``func`` in a render pass of its own."""
        logger.debug("detached call to %s", getattr(func, "__name__", func))
        return run_render_pass(self.backend, self.codec, func, *args, **kwargs)

    def helper(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Wrap a helper (or built-in helper) registered with the engine."""
        if is_guarded(func):
            return func

        @functools.wraps(func)
        def guarded(this: Any, *args: Any, **kwargs: Any) -> Any:
            if args and _is_block_options(args[0]):
                args = (self.options(args[0]), *args[1:])
            if has_placeholders(args, kwargs):
                return intercept(self._deferred(func, this, args, kwargs))
            return self.call(func, this, *args, **kwargs)

        setattr(guarded, _GUARDED, True)
        return guarded

    async def _deferred(
        self,
        func: Callable[..., Any],
        this: Any,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> Any:
        positional, keyword = await resolve_arguments(args, kwargs)
        logger.debug("arguments resolved for deferred helper %s", getattr(func, "__name__", func))
        return await self.detached(func, this, *positional, **keyword)

    def options(self, options: dict[str, Any]) -> dict[str, Any]:
        """Copy block ``options`` with guarded ``fn`` and ``inverse``."""
        guarded = dict(options)
        guarded["fn"] = self.block(options["fn"])
        guarded["inverse"] = self.block(options["inverse"])
        return guarded

    def block(self, block: Callable[..., Any]) -> Callable[..., Any]:
        """Guard block content.

        Inside a pass the engine's ``strlist`` comes back as usual; from an
        async continuation the result is an awaitable ``strlist``.
        """
        if is_guarded(block):
            return block

        def invoke(this: Any, *args: Any, **kwargs: Any) -> Any:
            return self.call(block, this, *args, **kwargs)

        setattr(invoke, _GUARDED, True)
        return invoke

    def partial(self, partial: Callable[..., Any]) -> Callable[..., Any]:
        """Guard a compiled partial.

        Inside a pass the partial shares the caller's ledger and returns
        its text directly. A partial whose context or hash overrides hold
        placeholders (``{{> card (asyncUser)}}``) is deferred like a helper
        and the caller receives a placeholder.
        """
        if is_guarded(partial):
            return partial

        @functools.wraps(partial)
        def invoke(context: Any, *args: Any, **kwargs: Any) -> Any:
            if get_render_pass() is None:
                return self.detached(partial, context, *args, **kwargs)
            if _scope_has_placeholders(context):
                return intercept(self._deferred_partial(partial, context, args, kwargs))
            return partial(context, *args, **kwargs)

        setattr(invoke, _GUARDED, True)
        return invoke

    async def _deferred_partial(
        self,
        partial: Callable[..., Any],
        scope: Any,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> Any:
        if isinstance(scope, Scope):
            (context,), overrides = await resolve_arguments(
                (scope.context,), scope.overrides or {}
            )
            scope = Scope(context, scope.parent, scope.root, overrides=overrides or None)
        else:
            (scope,), _ = await resolve_arguments((scope,), {})
        return await self.detached(partial, scope, *args, **kwargs)

    def builtins(self) -> dict[str, Callable[..., Any]]:
        """The engine's built-in helpers (``if``, ``each``, ...), guarded."""
        return {name: self.helper(func) for name, func in _pybars_["helpers"].items()}
