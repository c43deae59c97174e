"""
Unit tests for SSE frame decoding.
"""

import pytest

from chatrelay.streaming.frames import DONE, decode_frame_line, iter_frames


async def _agen(items):
    for item in items:
        yield item


@pytest.mark.unit
class TestDecodeFrameLine:
    """Tests for decode_frame_line."""

    def test_json_frame(self):
        assert decode_frame_line('data: {"a": 1}') == {"a": 1}

    def test_value_is_trimmed(self):
        assert decode_frame_line('data:   {"a": 1}   ') == {"a": 1}

    def test_done_sentinel(self):
        assert decode_frame_line("data: [DONE]") is DONE
        assert decode_frame_line("data: [DONE]  ") is DONE

    @pytest.mark.parametrize(
        "line",
        [
            "",
            ": keep-alive comment",
            "event: message",
            'data:{"no": "space"}',
            "data: ",
            "data: {not json",
            'data: {"truncated":',
        ],
    )
    def test_ignored_lines(self, line):
        assert decode_frame_line(line) is None


@pytest.mark.unit
class TestIterFrames:
    @pytest.mark.asyncio
    async def test_malformed_frame_does_not_affect_later_frames(self):
        lines = ['data: {"n": 1}', "data: {broken", "", 'data: {"n": 2}']
        frames = [f async for f in iter_frames(_agen(lines))]
        assert frames == [{"n": 1}, {"n": 2}]

    @pytest.mark.asyncio
    async def test_stops_at_done(self):
        lines = ['data: {"n": 1}', "data: [DONE]", 'data: {"n": 2}']
        frames = [f async for f in iter_frames(_agen(lines))]
        assert frames == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_ends_without_sentinel(self):
        frames = [f async for f in iter_frames(_agen(['data: {"n": 1}']))]
        assert frames == [{"n": 1}]
