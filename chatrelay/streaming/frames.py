"""
Server-sent event frame decoding.

Only ``data: `` lines matter. The payload is either the ``[DONE]`` sentinel or
a JSON document; anything that fails to parse is skipped, since one bad frame
should never take down the whole response.
"""

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class _Done:
    """Marker returned by decode_frame_line for the end-of-stream sentinel."""

    def __repr__(self) -> str:
        return "DONE"


DONE = _Done()


def decode_frame_line(line: str) -> Any:
    """Decode one text line.

    Returns:
        DONE for the termination sentinel, None for lines that carry no frame
        (no marker, empty value, malformed JSON), otherwise the parsed JSON value.
    """
    if not line.startswith(DATA_PREFIX):
        return None

    data = line[len(DATA_PREFIX) :].strip()
    if data == DONE_SENTINEL:
        return DONE
    if not data:
        return None

    try:
        return json.loads(data)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed frame: {data[:80]!r}")
        return None


async def iter_frames(lines: AsyncIterable[str]) -> AsyncIterator[Any]:
    """Yield decoded frames until the sentinel or the end of the lines."""
    async for line in lines:
        frame = decode_frame_line(line)
        if frame is DONE:
            return
        if frame is not None:
            yield frame
