"""
Unit tests for line reassembly.

Upstream reads can end anywhere: mid-line, mid-CRLF, or inside a multi-byte
UTF-8 character.
"""

import logging

import pytest

from chatrelay.streaming.lines import LineReassembler, iter_lines


async def _agen(items):
    for item in items:
        yield item


@pytest.mark.unit
class TestLineReassembler:
    """Tests for LineReassembler.feed / finish."""

    def test_complete_lines_in_one_chunk(self):
        r = LineReassembler()
        assert r.feed(b"data: a\n\ndata: b\n") == ["data: a", "", "data: b"]
        assert r.pending == ""

    def test_partial_line_is_carried_over(self):
        r = LineReassembler()
        assert r.feed(b"data: {\"x\"") == []
        assert r.pending == 'data: {"x"'
        assert r.feed(b": 1}\n") == ['data: {"x": 1}']

    def test_crlf_is_stripped(self):
        r = LineReassembler()
        assert r.feed(b"data: a\r") == []
        assert r.feed(b"\ndata: b\r\n") == ["data: a", "data: b"]

    def test_multibyte_character_split_across_reads(self):
        encoded = "data: héllo → 世界\n".encode("utf-8")
        r = LineReassembler()
        lines = []
        for i in range(len(encoded)):
            lines.extend(r.feed(encoded[i : i + 1]))
        assert lines == ["data: héllo → 世界"]

    def test_finish_discards_incomplete_line(self, caplog):
        r = LineReassembler()
        r.feed(b"data: complete\ndata: trunc")
        with caplog.at_level(logging.DEBUG, logger="chatrelay.streaming.lines"):
            r.finish()
        assert r.pending == ""
        assert "Discarding incomplete trailing line" in caplog.text

    def test_finish_with_empty_buffer_is_quiet(self, caplog):
        r = LineReassembler()
        r.feed(b"data: x\n")
        with caplog.at_level(logging.DEBUG, logger="chatrelay.streaming.lines"):
            r.finish()
        assert caplog.text == ""


@pytest.mark.unit
class TestIterLines:
    @pytest.mark.asyncio
    async def test_yields_lines_in_order_and_drops_tail(self):
        lines = [line async for line in iter_lines(_agen([b"one\ntw", b"o\nthr", b"ee"]))]
        assert lines == ["one", "two"]

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        assert [line async for line in iter_lines(_agen([]))] == []
