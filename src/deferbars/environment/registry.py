"""Helper and partial registries for AsyncHandlebars.

Dict-like views over the environment's helper/partial tables. Every value
stored goes through the call-site guard first, so the engine only ever sees
wrapped callables.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from deferbars.environment.core import AsyncHandlebars


class CallableRegistry:
    """Dict-like interface for helpers/partials.

    Supports:
        - env.helpers['name'] = func
        - env.helpers.update({'name': func})
        - func = env.helpers['name']
        - 'name' in env.helpers
        - del env.helpers['name']

    All mutations use copy-on-write, so a render that already took the
    table keeps a consistent snapshot.
    """

    __slots__ = ("_attr", "_env", "_wrap")

    def __init__(
        self,
        env: AsyncHandlebars,
        attr: str,
        wrap: Callable[[Any], Callable[..., Any]],
    ):
        self._env = env
        self._attr = attr
        self._wrap = wrap

    def _get_dict(self) -> dict[str, Callable[..., Any]]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Callable[..., Any]]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._get_dict()[name]

    def __setitem__(self, name: str, value: Any) -> None:
        new = self._get_dict().copy()
        new[name] = self._wrap(value)
        self._set_dict(new)

    def __delitem__(self, name: str) -> None:
        new = self._get_dict().copy()
        del new[name]
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(self, name: str, default: Callable[..., Any] | None = None) -> Callable[..., Any] | None:
        return self._get_dict().get(name, default)

    def update(self, mapping: Mapping[str, Any]) -> None:
        """Batch update (one copy for the whole mapping)."""
        new = self._get_dict().copy()
        for name, value in mapping.items():
            new[name] = self._wrap(value)
        self._set_dict(new)

    def pop(self, name: str, *default: Any) -> Any:
        new = self._get_dict().copy()
        value = new.pop(name, *default)
        self._set_dict(new)
        return value

    def copy(self) -> dict[str, Callable[..., Any]]:
        """Return a copy of the underlying dict."""
        return self._get_dict().copy()

    def keys(self):
        return self._get_dict().keys()

    def values(self):
        return self._get_dict().values()

    def items(self):
        return self._get_dict().items()
