"""AsyncHandlebars — the wrapped engine presented to callers.

Holds a ``pybars.Compiler`` plus the helper and partial tables, and is the
only place where user callables meet the call-site guard:

    ```
    register_helper(name, fn)      → guard.helper(fn)
    register_partial(name, source) → guard.partial(compiler.compile(source))
    compile(source)                → AsyncTemplate(compiler.compile(source))
    built-in helpers (if, each...) → guard.helper(builtin), passed per render
    ```

pybars takes helpers and partials per render call rather than registering
them globally, so the wrapped tables are snapshotted at the start of each
render and handed to the compiled function.

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pybars import Compiler

from deferbars.backend import AsyncBackend, AsyncioBackend
from deferbars.codec import DEFAULT_PLACEHOLDER_CHAR, PlaceholderCodec
from deferbars.environment.exceptions import ConfigurationError, ErrorCode
from deferbars.environment.registry import CallableRegistry
from deferbars.guard import CallSiteGuard
from deferbars.orchestrator import run_render_pass
from deferbars.template import AsyncTemplate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WrapOptions:
    """Configuration for ``wrap()``.

    Attributes:
        placeholder_char: Reserved marker character; must not occur in
            templates, partials or data
        backend: Future capability (the promise implementation)
    """

    placeholder_char: str = DEFAULT_PLACEHOLDER_CHAR
    backend: AsyncBackend = field(default_factory=AsyncioBackend)

    def __post_init__(self) -> None:
        PlaceholderCodec(self.placeholder_char)
        if not isinstance(self.backend, AsyncBackend):
            raise ConfigurationError(
                f"backend {self.backend!r} does not provide is_future_like, "
                "ensure_future and gather",
                code=ErrorCode.INVALID_BACKEND,
                suggestion="Pass an AsyncioBackend() or an object implementing AsyncBackend",
            )


class AsyncHandlebars:
    """pybars environment whose templates render asynchronously.

    Example:
        >>> env = AsyncHandlebars()
        >>> async def shout(this, value):
        ...     await asyncio.sleep(0.01)
        ...     return value.upper()
        >>> env.register_helper("shout", shout)
        >>> await env.compile("{{shout name}}!")({"name": "hi"})
        'HI!'
    """

    def __init__(self, compiler: Compiler | None = None, options: WrapOptions | None = None):
        self.options = options if options is not None else WrapOptions()
        self.compiler = compiler if compiler is not None else Compiler()
        self.codec = PlaceholderCodec(self.options.placeholder_char)
        self.guard = CallSiteGuard(self.options.backend, self.codec)
        # pybars.Compiler keeps builder state between calls
        self._compile_lock = threading.Lock()
        self._builtins = self.guard.builtins()
        self._helpers: dict[str, Callable[..., Any]] = {}
        self._partials: dict[str, Callable[..., Any]] = {}
        self.helpers = CallableRegistry(self, "_helpers", self.guard.helper)
        self.partials = CallableRegistry(self, "_partials", self._make_partial)

    # -- compile -------------------------------------------------------------

    def compile(self, source: str, name: str | None = None) -> AsyncTemplate:
        """Compile ``source`` into an ``AsyncTemplate``."""
        return AsyncTemplate(self, self._compile_source(source), source=source, name=name)

    def _compile_source(self, source: str) -> Callable[..., Any]:
        with self._compile_lock:
            return self.compiler.compile(source)

    # -- helpers -------------------------------------------------------------

    def register_helper(
        self,
        name: str | Mapping[str, Callable[..., Any]],
        func: Callable[..., Any] | None = None,
    ) -> None:
        """Register a helper, or a mapping of helpers.

        Helpers are called as ``func(this, *args, **hash)``; block helpers
        as ``func(this, options, *args, **hash)``. Either kind may return a
        plain value or an awaitable.
        """
        if isinstance(name, Mapping):
            self.helpers.update(name)
            return
        if func is None or not callable(func):
            raise ConfigurationError(
                f"helper '{name}' must be callable, got {func!r}",
                code=ErrorCode.INVALID_HELPER,
            )
        self.helpers[name] = func

    def unregister_helper(self, name: str) -> None:
        self.helpers.pop(name, None)

    # -- partials ------------------------------------------------------------

    def register_partial(
        self,
        name: str | Mapping[str, Any],
        partial: str | AsyncTemplate | Callable[..., Any] | None = None,
    ) -> None:
        """Register a partial from source, an AsyncTemplate or a compiled template.

        Partials always contribute plain text to the template that includes
        them; async helpers inside a partial are resolved with the caller.
        """
        if isinstance(name, Mapping):
            self.partials.update(name)
            return
        self.partials[name] = partial

    def unregister_partial(self, name: str) -> None:
        self.partials.pop(name, None)

    def _make_partial(self, partial: Any) -> Callable[..., Any]:
        if isinstance(partial, str):
            compiled = self._compile_source(partial)
        elif isinstance(partial, AsyncTemplate):
            compiled = partial.render_func
        elif callable(partial):
            compiled = partial
        else:
            raise ConfigurationError(
                f"partial must be template source, an AsyncTemplate or a compiled "
                f"template, got {type(partial).__name__}",
                code=ErrorCode.INVALID_PARTIAL,
            )
        return self.guard.partial(compiled)

    # -- rendering -----------------------------------------------------------

    def helpers_for_render(
        self, extra: Mapping[str, Callable[..., Any]] | None = None
    ) -> dict[str, Callable[..., Any]]:
        """Guarded built-ins, registered helpers, then per-call helpers."""
        table = dict(self._builtins)
        table.update(self._helpers)
        if extra:
            table.update({name: self.guard.helper(func) for name, func in extra.items()})
        return table

    def partials_for_render(
        self, extra: Mapping[str, Any] | None = None
    ) -> dict[str, Callable[..., Any]]:
        table = dict(self._partials)
        if extra:
            table.update({name: self._make_partial(p) for name, p in extra.items()})
        return table

    async def render_compiled(
        self,
        render_func: Callable[..., Any],
        context: Any,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
        partials: Mapping[str, Any] | None = None,
    ) -> str:
        """Run one top-level render pass of a compiled pybars template."""
        return await run_render_pass(
            self.options.backend,
            self.codec,
            render_func,
            context,
            helpers=self.helpers_for_render(helpers),
            partials=self.partials_for_render(partials),
        )

    def __repr__(self) -> str:
        return (
            f"<AsyncHandlebars helpers={len(self._helpers)} "
            f"partials={len(self._partials)} placeholder={self.codec.char!r}>"
        )


def wrap(
    compiler: Compiler | None = None,
    *,
    placeholder_char: str = DEFAULT_PLACEHOLDER_CHAR,
    backend: AsyncBackend | None = None,
) -> AsyncHandlebars:
    """Wrap a pybars compiler so its templates accept async helpers.

    Args:
        compiler: Existing ``pybars.Compiler`` (a new one by default)
        placeholder_char: Reserved marker character
        backend: Future capability (``AsyncioBackend()`` by default)

    Returns:
        An ``AsyncHandlebars`` environment

    Raises:
        ConfigurationError: If an option is invalid
    """
    options = WrapOptions(
        placeholder_char=placeholder_char,
        backend=backend if backend is not None else AsyncioBackend(),
    )
    logger.debug("wrapping pybars compiler with %r", options)
    return AsyncHandlebars(compiler, options)
