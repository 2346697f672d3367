"""Tests for value interception and placeholder values."""

from __future__ import annotations

import pytest
from pybars import strlist

from deferbars import (
    AsyncioBackend,
    NoActiveLedgerError,
    PlaceholderCodec,
    PlaceholderValue,
    intercept,
)
from deferbars.render_pass import open_render_pass
from deferbars.values import has_placeholders, register, resolve_arguments

from .conftest import later


@pytest.fixture
def codec() -> PlaceholderCodec:
    return PlaceholderCodec()


class TestIntercept:
    def test_plain_values_pass_through(self, codec: PlaceholderCodec) -> None:
        safe = strlist(["<b>"])
        with open_render_pass(AsyncioBackend(), codec) as render_pass:
            assert intercept("text") == "text"
            assert intercept(3) == 3
            assert intercept(None) is None
            assert intercept(safe) is safe
        assert len(render_pass.ledger) == 0

    def test_pending_value_becomes_placeholder(self, codec: PlaceholderCodec) -> None:
        with open_render_pass(AsyncioBackend(), codec) as render_pass:
            first = intercept(later("a"))
            second = intercept(later("b"))
        assert isinstance(first, PlaceholderValue)
        assert first == codec.encode(0)
        assert second == codec.encode(1)
        assert (first.index, second.index) == (0, 1)
        assert first.ledger is render_pass.ledger
        assert len(render_pass.ledger) == 2
        for i in range(2):
            render_pass.ledger._entries[i].close()

    def test_no_registration_outside_a_pass(self) -> None:
        coro = later("x")
        assert intercept(coro) is coro
        coro.close()

    def test_register_requires_a_pass(self) -> None:
        coro = later("x")
        with pytest.raises(NoActiveLedgerError):
            register(coro)
        coro.close()


class TestPlaceholderValue:
    def test_behaves_like_its_token(self, codec: PlaceholderCodec) -> None:
        with open_render_pass(AsyncioBackend(), codec) as render_pass:
            value = intercept(later("x"))
        assert "a" + value + "b" == "a" + codec.encode(0) + "b"
        assert str(value) == codec.encode(0)
        assert type(str(value)) is str
        render_pass.ledger._entries[0].close()

    def test_html_protocol_gives_escaped_form(self, codec: PlaceholderCodec) -> None:
        with open_render_pass(AsyncioBackend(), codec) as render_pass:
            value = intercept(later("x"))
        assert value.__html__() == codec.encode_escaped(0)
        assert codec.decode(value.__html__()).escaped
        render_pass.ledger._entries[0].close()

    def test_repr_names_ledger_and_index(self, codec: PlaceholderCodec) -> None:
        with open_render_pass(AsyncioBackend(), codec) as render_pass:
            value = intercept(later("x"))
        assert repr(value) == f"PlaceholderValue(ledger=#{render_pass.ledger.id}, index=0)"
        render_pass.ledger._entries[0].close()


class TestArguments:
    def test_has_placeholders(self, codec: PlaceholderCodec) -> None:
        with open_render_pass(AsyncioBackend(), codec) as render_pass:
            value = intercept(later("x"))
        assert has_placeholders((1, value), {})
        assert has_placeholders((), {"key": value})
        assert not has_placeholders(("plain", codec.encode(0)), {"key": 1})
        render_pass.ledger._entries[0].close()

    @pytest.mark.asyncio
    async def test_resolve_arguments(self, codec: PlaceholderCodec) -> None:
        with open_render_pass(AsyncioBackend(), codec):
            a = intercept(later({"temp": 15.99}, ticks=3))
            b = intercept(later("B"))
        args, kwargs = await resolve_arguments(("lit", a), {"b": b, "c": 3})
        assert args == ["lit", {"temp": 15.99}]
        assert kwargs == {"b": "B", "c": 3}

    @pytest.mark.asyncio
    async def test_resolve_without_placeholders(self) -> None:
        args, kwargs = await resolve_arguments((1, 2), {"x": "y"})
        assert args == [1, 2]
        assert kwargs == {"x": "y"}
