"""Tests for the placeholder codec."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from deferbars import ConfigurationError, ErrorCode, PlaceholderCodec

from .strategies import ledger_index, marker_free_text


@pytest.fixture
def codec() -> PlaceholderCodec:
    return PlaceholderCodec()


class TestEncode:
    def test_token_layout(self, codec: PlaceholderCodec) -> None:
        assert codec.encode(0) == "\u00010>"
        assert codec.encode(42) == "\u000142>"

    def test_escaped_token_layout(self, codec: PlaceholderCodec) -> None:
        assert codec.encode_escaped(7) == "\u00017&gt;"

    def test_negative_index_rejected(self, codec: PlaceholderCodec) -> None:
        with pytest.raises(ValueError):
            codec.encode(-1)

    def test_custom_marker(self) -> None:
        codec = PlaceholderCodec("\u00a7")
        assert codec.encode(3) == "\u00a73>"
        assert codec.decode("\u00a73&gt;").index == 3

    @given(index=ledger_index)
    def test_decode_inverts_encode(self, index: int) -> None:
        codec = PlaceholderCodec()
        assert codec.decode(codec.encode(index)).index == index
        assert codec.decode(codec.encode(index)).escaped is False
        assert codec.decode(codec.encode_escaped(index)).escaped is True


class TestDecode:
    @pytest.mark.parametrize(
        "text",
        ["", "\u0001", "\u0001>", "\u00011", "x\u00011>", "\u00011>y", "\u0001a>"],
    )
    def test_rejects_non_tokens(self, codec: PlaceholderCodec, text: str) -> None:
        with pytest.raises(ValueError):
            codec.decode(text)


class TestScan:
    def test_finds_occurrences_left_to_right(self, codec: PlaceholderCodec) -> None:
        text = "a\u00012>b\u00010&gt;c"
        matches = list(codec.scan(text))
        assert [(m.index, m.escaped) for m in matches] == [(2, False), (0, True)]
        assert text[matches[0].start:matches[0].end] == "\u00012>"
        assert text[matches[1].start:matches[1].end] == "\u00010&gt;"

    def test_scan_is_lazy(self, codec: PlaceholderCodec) -> None:
        matches = codec.scan("\u00011>\u00012>")
        assert next(matches).index == 1
        assert next(matches).index == 2
        with pytest.raises(StopIteration):
            next(matches)

    def test_malformed_sequences_are_skipped(self, codec: PlaceholderCodec) -> None:
        text = "\u0001>x\u0001\u00015y\u00013>"
        assert [m.index for m in codec.scan(text)] == [3]

    def test_same_index_twice(self, codec: PlaceholderCodec) -> None:
        assert [m.index for m in codec.scan("\u00011>-\u00011&gt;")] == [1, 1]

    @given(text=marker_free_text)
    def test_marker_free_text_has_no_matches(self, text: str) -> None:
        assert list(PlaceholderCodec().scan(text)) == []


class TestSubstitute:
    def test_replaces_each_occurrence(self, codec: PlaceholderCodec) -> None:
        text = "<\u00010>|\u00011&gt;>"
        result = codec.substitute(text, lambda m: f"[{m.index}:{int(m.escaped)}]")
        assert result == "<[0:0]|[1:1]>"

    def test_malformed_kept_literally(self, codec: PlaceholderCodec) -> None:
        text = "keep \u0001 this \u0001x>"
        assert codec.substitute(text, lambda m: "!") == text

    @given(text=marker_free_text)
    def test_identity_without_marker(self, text: str) -> None:
        assert PlaceholderCodec().substitute(text, lambda m: "!") is text

    @given(parts=st.lists(st.tuples(marker_free_text, ledger_index), max_size=5))
    def test_every_token_addressed(self, parts: list[tuple[str, int]]) -> None:
        codec = PlaceholderCodec()
        text = "".join(literal + codec.encode(i) for literal, i in parts)
        expected = "".join(literal + str(i) for literal, i in parts)
        assert codec.substitute(text, lambda m: str(m.index)) == expected


class TestValidation:
    @pytest.mark.parametrize("char", ["", "ab", "1", ">", "&", "=", "'", '"', "`", "<"])
    def test_invalid_markers(self, char: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            PlaceholderCodec(char)
        assert exc_info.value.code is ErrorCode.INVALID_PLACEHOLDER
        assert isinstance(exc_info.value, ValueError)
