from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from chatwire.core.exceptions import (
    ContextLengthExceededError,
    NetworkError,
    ParseError,
    RateLimitedError,
    RemoteError,
    UnauthenticatedError,
)
from chatwire.transport.http_transport import HttpTransport, StreamHandle, classify_status

ENDPOINT = 'https://api.example.test/v1/chat/completions'


def _transport(handler: Any, **kwargs: Any) -> HttpTransport:
    return HttpTransport('sk-test', client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs)


@pytest.mark.parametrize(
    ('status', 'body', 'expected'),
    [
        (429, 'context_length too', RateLimitedError),
        (401, '', UnauthenticatedError),
        (400, '{"error":{"code":"context_length_exceeded"}}', ContextLengthExceededError),
        (500, 'boom', RemoteError),
        (302, '', RemoteError),
    ],
)
def test_classify_status(status: int, body: str, expected: type[Exception]) -> None:
    assert isinstance(classify_status(status, body), expected)


def test_classify_success() -> None:
    assert classify_status(200, '') is None
    assert classify_status(204, 'context_length') is None


def test_non_streaming_request_shape_and_result() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['request'] = request
        return httpx.Response(200, json={'choices': [{'message': {'content': 'ok'}}]})

    transport = _transport(handler, extra_headers={'OpenAI-Project': 'proj-1'})
    result = asyncio.run(transport.send(ENDPOINT, b'{"model":"m"}'))

    assert result == {'choices': [{'message': {'content': 'ok'}}]}
    request: httpx.Request = seen['request']
    assert request.method == 'POST'
    assert str(request.url) == ENDPOINT
    assert request.headers['Authorization'] == 'Bearer sk-test'
    assert request.headers['Content-Type'] == 'application/json; charset=utf-8'
    assert request.headers['Accept'] == 'application/json'
    assert request.headers['OpenAI-Project'] == 'proj-1'
    assert json.loads(request.content) == {'model': 'm'}


def test_remote_error_carries_status_and_body() -> None:
    transport = _transport(lambda _: httpx.Response(503, text='overloaded'))
    with pytest.raises(RemoteError) as info:
        asyncio.run(transport.send(ENDPOINT, b'{}'))
    assert info.value.status == 503
    assert info.value.body == 'overloaded'


def test_context_length_error() -> None:
    transport = _transport(lambda _: httpx.Response(400, text='This model maximum context_length is 16384'))
    with pytest.raises(ContextLengthExceededError):
        asyncio.run(transport.send(ENDPOINT, b'{}'))


def test_rate_limit_applies_to_streaming_too() -> None:
    transport = _transport(lambda _: httpx.Response(429, text='slow down'))
    with pytest.raises(RateLimitedError):
        asyncio.run(transport.send(ENDPOINT, b'{}', want_stream=True))


def test_connect_failure_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('refused', request=request)

    with pytest.raises(NetworkError, match='HTTP request failed'):
        asyncio.run(_transport(handler).send(ENDPOINT, b'{}'))


def test_invalid_json_body_is_parse_error() -> None:
    transport = _transport(lambda _: httpx.Response(200, text='<html>gateway</html>'))
    with pytest.raises(ParseError, match='Failed to parse JSON response'):
        asyncio.run(transport.send(ENDPOINT, b'{}'))


def test_streaming_returns_open_handle(chunk_stream: Any) -> None:
    body = chunk_stream([b'data: a\n', b'data: b\n'])
    seen: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['request'] = request
        return httpx.Response(200, stream=body, headers={'Content-Type': 'text/event-stream'})

    async def _run() -> list[bytes]:
        handle = await _transport(handler).send(ENDPOINT, b'{}', want_stream=True)
        assert isinstance(handle, StreamHandle)
        async with handle:
            return [chunk async for chunk in handle.iter_chunks()]

    assert asyncio.run(_run()) == [b'data: a\n', b'data: b\n']
    assert seen['request'].headers['Accept'] == 'text/event-stream'
    assert body.closed


def test_stream_read_failure_is_network_error(chunk_stream: Any) -> None:
    body = chunk_stream([b'data: a\n', b'data: b\n'], fail_at=1)

    async def _run() -> None:
        handle = await _transport(lambda _: httpx.Response(200, stream=body)).send(ENDPOINT, b'{}', want_stream=True)
        async with handle:  # type: ignore[union-attr]
            async for _ in handle.iter_chunks():  # type: ignore[union-attr]
                pass

    with pytest.raises(NetworkError, match='Stream read error'):
        asyncio.run(_run())
    assert body.closed
