"""Render passes, from the synchronous engine call to the final value.

``run_render_pass()`` drives the top-level render and every detached
continuation (late block content, deferred helpers, partials). The call's
own result is intercepted like a helper result.

Substitution, per occurrence:
    - ``strlist`` values are safe and inserted verbatim
    - escaped occurrences (``{{ }}``) go through the engine's ``prepare()``
    - unescaped lists are flattened like block output; a non-block
      ``{{{asyncList}}}`` therefore differs from pybars, which prints
      ``str(list)``
    - unknown indices and self-references stay literal

"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pybars import strlist
from pybars._compiler import prepare

from deferbars.backend import AsyncBackend
from deferbars.codec import PlaceholderCodec, PlaceholderMatch
from deferbars.render_pass import open_render_pass
from deferbars.values import PlaceholderValue, intercept

logger = logging.getLogger(__name__)


async def run_render_pass(
    backend: AsyncBackend,
    codec: PlaceholderCodec,
    func: Callable[..., Any],
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Call ``func`` synchronously in a fresh pass and resolve its result.

    Args:
        backend: Future capability for the new ledger
        codec: Placeholder encoding
        func: Synchronous function to run (compiled template, block
            content, helper)
        *args: Positional arguments for ``func``
        **kwargs: Keyword arguments for ``func``

    Returns:
        ``func``'s result with every placeholder of this pass substituted.
        Strings stay strings, ``strlist`` stays ``strlist``; a pending
        result is replaced by its resolved value.

    Raises:
        Exception: Whatever ``func`` raised synchronously (nothing is
            awaited then), or the first failure among the pending values.
    """
    with open_render_pass(backend, codec) as render_pass:
        try:
            output = intercept(func(*args, **kwargs))
        except BaseException:
            render_pass.ledger.discard()
            raise

    ledger = render_pass.ledger
    if not len(ledger):
        return output

    results = await ledger.settle()
    substitution = Substitution(codec, ledger, results)
    value = substitution.expand_value(output)
    logger.debug("ledger #%d: substituted %d value(s)", ledger.id, len(results))
    return value


class Substitution:
    """Placeholder replacement for one settled ledger.

    Text for each ``(index, escaped)`` pair is computed once.
    """

    __slots__ = ("_codec", "_done", "_ledger", "_resolving", "_results")

    def __init__(self, codec: PlaceholderCodec, ledger: Any, results: list[Any]):
        self._codec = codec
        self._ledger = ledger
        self._results = results
        self._done: dict[tuple[int, bool], str] = {}
        self._resolving: set[int] = set()

    def expand_value(self, value: Any) -> Any:
        """Substitute placeholders in a pass result, keeping its type."""
        if isinstance(value, PlaceholderValue) and value.ledger is self._ledger:
            value = self._results[value.index]
        if isinstance(value, strlist):
            return strlist([self.expand("".join(value))])
        if isinstance(value, str):
            return self.expand(str(value))
        return value

    def expand(self, text: str) -> str:
        """Replace every placeholder occurrence in ``text``."""
        return self._codec.substitute(text, self._replace)

    def _replace(self, match: PlaceholderMatch) -> str:
        index = match.index
        if index >= len(self._results) or index in self._resolving:
            return self._literal(match)
        key = (index, match.escaped)
        text = self._done.get(key)
        if text is None:
            self._resolving.add(index)
            try:
                text = self._text_for(self._results[index], match.escaped)
            finally:
                self._resolving.discard(index)
            self._done[key] = text
        return text

    def _literal(self, match: PlaceholderMatch) -> str:
        if match.escaped:
            return self._codec.encode_escaped(match.index)
        return self._codec.encode(match.index)

    def _text_for(self, value: Any, escaped: bool) -> str:
        if isinstance(value, strlist):
            return self.expand("".join(value))
        if not escaped and isinstance(value, (list, tuple)):
            flat = strlist()
            flat.grow(value)
            return self.expand("".join(flat))
        text = prepare(value, False)
        text = self.expand(text if isinstance(text, str) else "".join(text))
        if escaped:
            return prepare(text, True)
        return text
