"""
Line reassembly for chunked upstream response bodies.

Upstream providers send server-sent events over a chunked HTTP body. A single
read can end in the middle of a line, or in the middle of a multi-byte UTF-8
character, so bytes are decoded incrementally and the trailing partial line is
carried over to the next read.
"""

import codecs
import logging
from typing import AsyncIterable, AsyncIterator, List

logger = logging.getLogger(__name__)


class LineReassembler:
    """Turns arbitrary byte chunks into complete text lines.

    Usage:
        reassembler = LineReassembler()
        for data in chunks:
            for line in reassembler.feed(data):
                handle(line)
        reassembler.finish()
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._carry = ""

    def feed(self, data: bytes) -> List[str]:
        """Consume one chunk and return the lines it completed, in order.

        Lines are returned without the newline; a trailing carriage return is
        stripped as well so CRLF bodies behave the same as LF bodies.
        """
        text = self._carry + self._decoder.decode(data)
        parts = text.split("\n")
        self._carry = parts.pop()
        return [part[:-1] if part.endswith("\r") else part for part in parts]

    def finish(self) -> None:
        """Signal end of stream.

        Whatever is left over never saw its newline, so it cannot be a complete
        frame and is dropped.
        """
        leftover = self._carry + self._decoder.decode(b"", final=True)
        self._carry = ""
        if leftover.strip():
            logger.debug(f"Discarding incomplete trailing line ({len(leftover)} chars)")

    @property
    def pending(self) -> str:
        """The current carry-over (incomplete last line)."""
        return self._carry


async def iter_lines(stream: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Lazily yield complete lines from an async byte stream."""
    reassembler = LineReassembler()
    async for data in stream:
        for line in reassembler.feed(data):
            yield line
    reassembler.finish()
