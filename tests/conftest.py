"""Pytest configuration and fixtures for deferbars tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from pybars import Compiler

from deferbars import AsyncHandlebars, wrap


async def later(value: Any, ticks: int = 1) -> Any:
    """Resolve to ``value`` after yielding to the event loop ``ticks`` times."""
    for _ in range(ticks):
        await asyncio.sleep(0)
    return value


async def failing(message: str = "helper failed") -> Any:
    """Coroutine that raises after one tick."""
    await asyncio.sleep(0)
    raise RuntimeError(message)


def echo(this: Any, value: Any) -> Any:
    """Async helper: resolves to its argument."""
    return later(value)


@pytest.fixture
def env() -> AsyncHandlebars:
    """Create a wrapped environment with the ``echo`` helper registered."""
    env = wrap()
    env.register_helper("echo", echo)
    return env


@pytest.fixture
def sync_render():
    """Render with plain pybars, for parity checks."""

    def render(source: str, context: Any = None, helpers: dict | None = None,
               partials: dict | None = None) -> str:
        compiler = Compiler()
        compiled_partials = {
            name: compiler.compile(p) for name, p in (partials or {}).items()
        }
        template = compiler.compile(source)
        return template(context if context is not None else {}, helpers=helpers,
                        partials=compiled_partials)

    return render
