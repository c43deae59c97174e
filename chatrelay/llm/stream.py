"""
Upstream response body as an owned, single-use byte stream.

Provider adapters hand one of these to the caller instead of a bare aiohttp
response so the caller controls when the connection is released. ``aclose()``
must run on every exit path; the easiest way is ``async with``.
"""

import logging
from typing import AsyncIterator, Optional

import aiohttp

logger = logging.getLogger(__name__)


class UpstreamStream:
    """Async iterator over the raw body of one streaming HTTP response.

    Owns both the response and (optionally) the ClientSession it came from and
    releases them in ``aclose()``. May be iterated only once.
    """

    def __init__(
        self,
        response: aiohttp.ClientResponse,
        session: Optional[aiohttp.ClientSession] = None,
        provider: str = "upstream",
    ):
        self._response = response
        self._session = session
        self.provider = provider
        self._consumed = False
        self._closed = False

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError("UpstreamStream can only be consumed once")
        self._consumed = True
        return self._iter_body()

    async def _iter_body(self) -> AsyncIterator[bytes]:
        async for data in self._response.content.iter_any():
            if data:
                yield data

    async def aclose(self) -> None:
        """Release the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._response.close()
        if self._session is not None:
            await self._session.close()
        logger.debug(f"Released {self.provider} upstream stream")

    async def __aenter__(self) -> "UpstreamStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
