"""Interception of pending helper results.

``intercept()`` is applied to every raw helper result. Awaitables produced
during a synchronous phase are registered in the active ledger and replaced
by a ``PlaceholderValue``; everything else passes through untouched, so
synchronous helpers behave exactly as they do without deferbars.

``PlaceholderValue`` is a ``str``: pybars prints, concatenates and escapes
it like any other helper result, and escaping turns its boundary into
``&gt;``, which is how substitution later knows the occurrence was escaped.
It also implements ``__html__`` (the markupsafe / kida ``Markup``
capability), returning that same escaped form, for helpers that escape
through the protocol instead of through the engine.

"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from deferbars.render_pass import get_render_pass, get_render_pass_required

if TYPE_CHECKING:
    from deferbars.ledger import Ledger


class PlaceholderValue(str):
    """Stand-in text for a pending value.

    Attributes:
        ledger: Ledger holding the pending value
        index: Position of the value in that ledger
    """

    ledger: Ledger
    index: int
    escaped_text: str

    def __new__(cls, token: str, ledger: Ledger, index: int, escaped_text: str) -> PlaceholderValue:
        obj = super().__new__(cls, token)
        obj.ledger = ledger
        obj.index = index
        obj.escaped_text = escaped_text
        return obj

    def __html__(self) -> str:
        return self.escaped_text

    def __repr__(self) -> str:
        return f"PlaceholderValue(ledger=#{self.ledger.id}, index={self.index})"


def intercept(value: Any) -> Any:
    """Register ``value`` if it is pending and a pass is active.

    Returns:
        A ``PlaceholderValue`` for registered values, ``value`` otherwise
    """
    render_pass = get_render_pass()
    if render_pass is None or not render_pass.backend.is_future_like(value):
        return value
    return register(value)


def register(value: Any) -> PlaceholderValue:
    """Register a pending value in the active ledger.

    Raises:
        NoActiveLedgerError: If no synchronous phase is running
        LedgerClosedError: If the pass's ledger was closed meanwhile
    """
    render_pass = get_render_pass_required()
    index = render_pass.ledger.register(value)
    codec = render_pass.codec
    return PlaceholderValue(
        codec.encode(index),
        render_pass.ledger,
        index,
        codec.encode_escaped(index),
    )


def has_placeholders(args: Sequence[Any], kwargs: Mapping[str, Any]) -> bool:
    """True if any positional or hash argument is a placeholder."""
    return any(isinstance(a, PlaceholderValue) for a in args) or any(
        isinstance(v, PlaceholderValue) for v in kwargs.values()
    )


async def resolve_arguments(
    args: Sequence[Any], kwargs: Mapping[str, Any]
) -> tuple[list[Any], dict[str, Any]]:
    """Replace placeholder arguments by the values they stand for.

    The helper then runs with the resolved raw values, never with tokens.
    All placeholders are awaited together.
    """
    names = list(kwargs)
    values = [*args, *(kwargs[name] for name in names)]
    pending = [
        (position, value) for position, value in enumerate(values)
        if isinstance(value, PlaceholderValue)
    ]
    if pending:
        backend = pending[0][1].ledger.backend
        resolved = await backend.gather([v.ledger.future(v.index) for _, v in pending])
        for (position, _), result in zip(pending, resolved):
            values[position] = result
    positional = values[: len(args)]
    keyword = dict(zip(names, values[len(args):]))
    return positional, keyword
