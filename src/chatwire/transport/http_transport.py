"""transport.http_transport

Issues one POST per call over a shared `httpx.AsyncClient` and classifies
the HTTP status into the *chatwire* error taxonomy.

Non-streaming calls return the parsed JSON document. Streaming calls return
a `StreamHandle` over the still-undecoded response body; the handle owns the
open response and must be closed (it is an async context manager).

No retries happen here.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from chatwire.core.exceptions import (
    ContextLengthExceededError,
    NetworkError,
    ParseError,
    RateLimitedError,
    RemoteError,
    UnauthenticatedError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from chatwire.core.exceptions import ChatWireError

logger = logging.getLogger(__name__)

USER_AGENT = 'chatwire/0.1'
CONTEXT_LENGTH_MARKER = 'context_length'


def classify_status(status: int, body: str) -> ChatWireError | None:
    """Map a response status (and body) to an error, or ``None`` for 2xx.

    Checked in this order: 429, 401, then any other non-2xx, which becomes
    `ContextLengthExceededError` when the body mentions the context-length
    marker and `RemoteError` otherwise.
    """
    if status == httpx.codes.TOO_MANY_REQUESTS:
        return RateLimitedError('Rate limit exceeded')
    if status == httpx.codes.UNAUTHORIZED:
        return UnauthenticatedError('Authentication failed. Please check your API key.')
    if 200 <= status < 300:  # noqa: PLR2004
        return None
    if CONTEXT_LENGTH_MARKER in body:
        return ContextLengthExceededError('Context length exceeded')
    return RemoteError(status, body)


class StreamHandle:
    """Open streaming response. Yields raw body chunks, closes on exit."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def closed(self) -> bool:
        return self._response.is_closed

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        """Yield body chunks as delivered; transport failures become `NetworkError`."""
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            raise NetworkError(f'Stream read error: {exc}') from exc

    async def read_text(self) -> str:
        """Drain the rest of the body as text."""
        try:
            await self._response.aread()
        except httpx.HTTPError as exc:
            raise NetworkError(f'Failed to read stream: {exc}') from exc
        return self._response.text

    async def aclose(self) -> None:
        await self._response.aclose()

    async def __aenter__(self) -> StreamHandle:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class HttpTransport:
    """Thin async POST wrapper shared by every call of one client."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 60.0,
        extra_headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._extra_headers = dict(extra_headers or {})
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, headers={'User-Agent': USER_AGENT})

    def _headers(self, *, want_stream: bool) -> dict[str, str]:
        headers = {
            'Authorization': f'Bearer {self._api_key}',
            'Content-Type': 'application/json; charset=utf-8',
            'Accept': 'text/event-stream' if want_stream else 'application/json',
        }
        if want_stream:
            headers['Cache-Control'] = 'no-cache'
        headers.update(self._extra_headers)
        return headers

    async def send(self, endpoint: str, body: bytes, *, want_stream: bool = False) -> dict[str, Any] | StreamHandle:
        """POST *body* to *endpoint*.

        Returns
        -------
        dict | StreamHandle
            The decoded JSON document, or an open `StreamHandle` when
            *want_stream* is set.

        Raises
        ------
        NetworkError
            Connection, timeout or read failure.
        RateLimitedError, UnauthenticatedError, ContextLengthExceededError, RemoteError
            Non-2xx status, see `classify_status`.
        ParseError
            A 2xx non-streaming body that is not JSON.

        """
        headers = self._headers(want_stream=want_stream)
        request = self._client.build_request('POST', endpoint, content=body, headers=headers)
        logger.debug('POST %s (stream=%s, %d bytes)', endpoint, want_stream, len(body))
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise NetworkError(f'HTTP request failed: {exc}') from exc

        handle = StreamHandle(response)
        try:
            if response.status_code < 200 or response.status_code >= 300:  # noqa: PLR2004
                await self._raise_for_status(handle)
            if want_stream:
                return handle
            text = await handle.read_text()
        except BaseException:
            await handle.aclose()
            raise
        await handle.aclose()

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f'Failed to parse JSON response: {exc}') from exc

    @staticmethod
    async def _raise_for_status(handle: StreamHandle) -> None:
        try:
            body = await handle.read_text()
        except NetworkError:
            body = 'Unknown error'
        error = classify_status(handle.status_code, body)
        if error is not None:
            logger.debug('HTTP %d classified as %s', handle.status_code, type(error).__name__)
            raise error

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
