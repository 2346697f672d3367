"""Placeholder tokens written in place of pending values.

Token layout::

    <marker><index><boundary>
    "\\x01" "12"   ">"        → "\\x0112>"

The boundary is ``>`` so that the engine's HTML escaping turns it into
``&gt;``. Scanning the rendered output therefore tells, for every single
occurrence, whether the engine escaped it, without any bookkeeping outside
the token itself.

Caveat:
    The marker is assumed not to occur in templates, partials or input
    data. Text that merely resembles a token (marker without digits, or a
    missing boundary) is left as literal text; a genuine collision is not
    detected.

"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

DEFAULT_PLACEHOLDER_CHAR = "\u0001"

BOUNDARY = ">"
ESCAPED_BOUNDARY = "&gt;"

# Characters pybars rewrites in escaped output; a marker from this set
# would not survive escaping.
_ENGINE_ESCAPED_CHARS = frozenset("&\"'`<>=")


@dataclass(frozen=True, slots=True)
class PlaceholderMatch:
    """One placeholder occurrence found in rendered text.

    Attributes:
        start: Offset of the marker character
        end: Offset just past the boundary
        index: Ledger index the token stands for
        escaped: True if the boundary appears in its HTML-escaped form
    """

    start: int
    end: int
    index: int
    escaped: bool


class PlaceholderCodec:
    """Encode ledger indices as tokens and find them again in output.

    Example:
        >>> codec = PlaceholderCodec()
        >>> codec.encode(3)
        '\\x013>'
        >>> [m.index for m in codec.scan("a\\x013>b\\x014&gt;")]
        [3, 4]
    """

    __slots__ = ("_pattern", "char")

    def __init__(self, char: str = DEFAULT_PLACEHOLDER_CHAR):
        from deferbars.environment.exceptions import ConfigurationError

        if not isinstance(char, str) or len(char) != 1:
            raise ConfigurationError(
                f"placeholder_char must be a single character, got {char!r}",
                suggestion="Use a control or private-use character such as '\\u0001'",
            )
        if char.isdigit() or char in _ENGINE_ESCAPED_CHARS:
            raise ConfigurationError(
                f"placeholder_char {char!r} is a digit or is rewritten by HTML escaping",
                suggestion="Pick a character that never appears in templates or data",
            )
        self.char = char
        self._pattern = re.compile(
            re.escape(char) + r"([0-9]+)(" + re.escape(BOUNDARY) + "|" + ESCAPED_BOUNDARY + ")"
        )

    def encode(self, index: int) -> str:
        """Return the token for a non-negative ledger index."""
        if index < 0:
            raise ValueError(f"placeholder index must be non-negative, got {index}")
        return f"{self.char}{index}{BOUNDARY}"

    def encode_escaped(self, index: int) -> str:
        """Return the token as it reads after the engine HTML-escaped it."""
        if index < 0:
            raise ValueError(f"placeholder index must be non-negative, got {index}")
        return f"{self.char}{index}{ESCAPED_BOUNDARY}"

    def decode(self, token: str) -> PlaceholderMatch:
        """Parse a single token (escaped or not).

        Raises:
            ValueError: If ``token`` is not exactly one placeholder
        """
        m = self._pattern.fullmatch(token)
        if m is None:
            raise ValueError(f"not a placeholder token: {token!r}")
        return self._to_match(m)

    def scan(self, text: str) -> Iterator[PlaceholderMatch]:
        """Yield every well-formed occurrence in ``text``, left to right."""
        for m in self._pattern.finditer(text):
            yield self._to_match(m)

    def substitute(self, text: str, replace: Callable[[PlaceholderMatch], str]) -> str:
        """Replace every occurrence with ``replace(match)``.

        Fast path: text without the marker is returned as-is.
        """
        if self.char not in text:
            return text
        return self._pattern.sub(lambda m: replace(self._to_match(m)), text)

    @staticmethod
    def _to_match(m: re.Match[str]) -> PlaceholderMatch:
        return PlaceholderMatch(
            start=m.start(),
            end=m.end(),
            index=int(m.group(1)),
            escaped=m.group(2) != BOUNDARY,
        )

    def __repr__(self) -> str:
        return f"<PlaceholderCodec char={self.char!r}>"
