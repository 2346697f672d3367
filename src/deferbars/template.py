"""AsyncTemplate — a compiled pybars template that renders to an awaitable.

Calling the template runs pybars synchronously inside a fresh render pass
and resolves to the final string once every pending helper value has been
substituted. Templates without async helpers still return an awaitable, and
its result is identical to the plain pybars output.

Example:
    >>> env = wrap()
    >>> env.register_helper("helper", delayed_echo)
    >>> template = env.compile("123{{helper a}}456{{helper b}}")
    >>> await template({"a": "abc", "b": "xyz"})
    '123abc456xyz'

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from deferbars.environment.core import AsyncHandlebars


class AsyncTemplate:
    """Compiled template bound to an ``AsyncHandlebars`` environment.

    Templates hold no per-render state; the same object can be rendered
    concurrently, each call owning its own ledger.

    Attributes:
        name: Optional identifier (for repr and logs)
        source: Template source, when compiled from a string
    """

    __slots__ = ("_env", "_render_func", "name", "source")

    def __init__(
        self,
        env: AsyncHandlebars,
        render_func: Callable[..., Any],
        source: str | None = None,
        name: str | None = None,
    ):
        self._env = env
        self._render_func = render_func
        self.source = source
        self.name = name

    @property
    def render_func(self) -> Callable[..., Any]:
        """The underlying synchronous pybars render function."""
        return self._render_func

    async def __call__(
        self,
        context: Any = None,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
        partials: Mapping[str, Any] | None = None,
    ) -> str:
        """Render with ``context``.

        Args:
            context: Template data (dict, object or pybars Scope)
            helpers: Extra helpers for this call only (wrapped like
                registered ones, taking precedence over them)
            partials: Extra partials for this call only

        Returns:
            The rendered string with all async helper results substituted

        Raises:
            Exception: The synchronous render error or the first failed
                helper value, unchanged
        """
        return await self._env.render_compiled(
            self._render_func,
            {} if context is None else context,
            helpers=helpers,
            partials=partials,
        )

    async def render(self, *args: Any, **kwargs: Any) -> str:
        """Render with a dict context and/or keyword variables.

        Example:
            >>> await template.render(name="World")
            >>> await template.render({"name": "World"})
        """
        ctx: dict[str, Any] = {}
        if args:
            if len(args) == 1 and isinstance(args[0], Mapping):
                ctx.update(args[0])
            else:
                raise TypeError(
                    f"render() takes at most 1 positional argument (a dict), got {len(args)}"
                )
        ctx.update(kwargs)
        return await self(ctx)

    def __repr__(self) -> str:
        return f"<AsyncTemplate {self.name or '(inline)'}>"
