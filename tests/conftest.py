from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any

import httpx
import pytest

from chatwire.client.chat_client import ChatClient
from chatwire.core.config import ClientConfig


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivering exactly the given chunks, optionally failing midway."""

    def __init__(self, chunks: Iterable[bytes | str], *, fail_at: int | None = None) -> None:
        self.chunks = [c.encode() if isinstance(c, str) else c for c in chunks]
        self.fail_at = fail_at
        self.delivered = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for index, chunk in enumerate(self.chunks):
            if index == self.fail_at:
                raise httpx.ReadError('connection reset by peer')
            self.delivered += 1
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


def sse_line(content: str) -> str:
    return 'data: ' + json.dumps({'choices': [{'delta': {'content': content}}]}) + '\n\n'


@pytest.fixture
def chunk_stream() -> type[ChunkStream]:
    return ChunkStream


@pytest.fixture
def sse() -> Callable[[str], str]:
    return sse_line


@pytest.fixture
def make_client() -> Callable[..., ChatClient]:
    """Build a ChatClient whose HTTP traffic goes to *handler*."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> ChatClient:
        config_fields = ('model', 'base_url', 'organization_id', 'project_id')
        config_kwargs = {k: kwargs.pop(k) for k in config_fields if k in kwargs}
        config = ClientConfig(api_key=kwargs.pop('api_key', 'sk-test'), **config_kwargs)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ChatClient(config, http_client=http_client, **kwargs)

    return _make
