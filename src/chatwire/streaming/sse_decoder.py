"""streaming.sse_decoder

Incremental decoder for Server-Sent-Events chat completion streams.

Chunks arrive with arbitrary boundaries: one SSE line may span several
chunks and one chunk may carry several lines. The decoder keeps a single
text buffer across chunks, processes every complete line and retains the
trailing fragment for the next chunk.

Line handling
=============
* lines not starting with ``"data: "`` are ignored (blank separators,
  ``:`` keep-alive comments, ``event:`` fields);
* ``data: [DONE]`` emits the final event and stops the stream;
* any other payload is parsed as JSON and ``choices[0].delta.content`` is
  emitted when it is a string. Payloads that fail to parse are skipped and
  the stream continues.

If the input ends without ``[DONE]`` a final event is still emitted.
"""

from __future__ import annotations

import codecs
import json
import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from chatwire.core.exceptions import NetworkError
from chatwire.core.json_path import JsonPath
from chatwire.core.types import StreamEvent

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)

DATA_PREFIX = 'data: '
DONE_SENTINEL = '[DONE]'
DELTA_CONTENT_PATH = JsonPath.of('choices', 0, 'delta', 'content')


class DecoderState(StrEnum):
    buffering = 'buffering'
    emitting = 'emitting'
    done = 'done'
    failed = 'failed'


class SSEDecoder:
    """Push-style state machine: `feed()` chunks, then `finish()` or `fail()`."""

    def __init__(self) -> None:
        self._buffer = ''
        self._utf8 = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self.state = DecoderState.buffering
        self.skipped_lines = 0

    @property
    def terminated(self) -> bool:
        return self.state in (DecoderState.done, DecoderState.failed)

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        """Consume *chunk* and return the events completed by it, in order.

        After a terminal state every further chunk is ignored.
        """
        if self.terminated:
            return []

        self._buffer += self._utf8.decode(chunk)
        *lines, self._buffer = self._buffer.split('\n')

        events: list[StreamEvent] = []
        self.state = DecoderState.emitting
        for line in lines:
            event = self._decode_line(line)
            if event is None:
                continue
            events.append(event)
            if event.is_final:
                self.state = DecoderState.done
                self._buffer = ''
                return events
        self.state = DecoderState.buffering
        return events

    def finish(self) -> StreamEvent | None:
        """Signal end of input. Returns the final event unless one was already emitted."""
        if self.terminated:
            return None
        if self._buffer:
            logger.debug('discarding incomplete trailing line (%d chars)', len(self._buffer))
        logger.warning('stream closed without %s sentinel', DONE_SENTINEL)
        self._buffer = ''
        self.state = DecoderState.done
        return StreamEvent.final()

    def fail(self) -> None:
        """Enter the failed state; the chunk source broke."""
        self.state = DecoderState.failed
        self._buffer = ''

    def _decode_line(self, line: str) -> StreamEvent | None:
        line = line.removesuffix('\r')
        if not line.startswith(DATA_PREFIX):
            return None
        payload = line[len(DATA_PREFIX) :]
        if payload == DONE_SENTINEL:
            return StreamEvent.final()
        try:
            parsed = json.loads(payload)
        except json.JSONDecodeError as exc:
            self.skipped_lines += 1
            logger.debug('skipping malformed stream payload: %s', exc)
            return None
        content = DELTA_CONTENT_PATH.resolve(parsed)
        if isinstance(content, str):
            return StreamEvent(delta_text=content, is_final=False)
        return None


async def decode_stream(chunks: AsyncIterable[bytes]) -> AsyncIterator[StreamEvent]:
    """Decode an async chunk source into `StreamEvent`s.

    Exactly one final event is yielded on success. Consumption stops right
    after ``[DONE]``; the remaining input is left unread.

    Raises
    ------
    NetworkError
        When the chunk source fails. No final event is yielded in that case.

    """
    decoder = SSEDecoder()
    try:
        async for chunk in chunks:
            for event in decoder.feed(chunk):
                yield event
            if decoder.terminated:
                return
    except NetworkError:
        decoder.fail()
        raise
    final = decoder.finish()
    if final is not None:
        yield final
