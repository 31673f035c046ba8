"""client.chat_client

Provider-agnostic async chat client.

Design goals
============
1. **One logical call, many envelopes** - callers pass `ChatMessage` and
   `GenerationOptions`; the model's registry entry selects the wire format.
   Callers never touch provider-specific payloads.
2. **No shared mutable state between calls** - an instance may be shared by
   any number of concurrent tasks. `set_model()` only swaps the default
   model used by calls started afterwards.
3. **Opt-in retry** - non-streaming calls are wrapped in `with_retry()` only
   when a `RetryStrategy` is given; streaming is never retried.
"""

from __future__ import annotations

import contextlib
import inspect
import logging
from typing import TYPE_CHECKING, Any, NamedTuple, cast

from chatwire.core.exceptions import ChatWireError, ConfigError
from chatwire.core.retry import RetryStrategy, with_retry
from chatwire.core.types import AnalysisType, ChatMessage, GenerationOptions, OHLCVAnalysis, OHLCVRecord, StreamEvent
from chatwire.registry.model_registry import ModelRegistry, model_registry
from chatwire.streaming.sse_decoder import decode_stream
from chatwire.structured.analysis import parse_analysis
from chatwire.structured.ohlcv import parse_ohlcv
from chatwire.structured.prompts import (
    build_analysis_messages,
    build_prediction_messages,
    build_structured_analysis_messages,
    estimated_max_tokens,
    resolve_analysis_type,
    validate_count,
)
from chatwire.transport.http_transport import HttpTransport, StreamHandle
from chatwire.wire.request_builder import RequestBuilder
from chatwire.wire.response_extractor import extract_content

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
    from types import TracebackType

    import httpx

    from chatwire.core.config import ClientConfig
    from chatwire.registry.descriptor import ModelDescriptor

    StreamCallback = Callable[[str, bool], Awaitable[None] | None]

logger = logging.getLogger(__name__)

PREDICTION_TEMPERATURE = 0.3
ANALYSIS_DEFAULTS: dict[str, Any] = {'temperature': 0.5, 'max_tokens': 1500}
STRUCTURED_ANALYSIS_DEFAULTS: dict[str, Any] = {'temperature': 0.4, 'max_tokens': 1200}
CONNECTION_CHECK_PROMPT = 'Hello, respond with "OK" if you can hear me.'


class ConnectionCheck(NamedTuple):
    ok: bool
    model: str
    detail: str


class ChatClient:
    """Async client over every model in the registry."""

    # ---------------------------------------------------------------------
    # Construction
    # ---------------------------------------------------------------------

    def __init__(
        self,
        config: ClientConfig,
        *,
        registry: ModelRegistry | None = None,
        retry_strategy: RetryStrategy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Validate *config* and prepare the shared transport.

        Raises
        ------
        ConfigError
            Blank API key.
        ModelNotSupportedError
            ``config.model`` is not in the registry.

        """
        if not config.api_key.strip():
            raise ConfigError('API Key cannot be empty')
        self._config = config
        self._registry = registry or model_registry
        self._model: ModelDescriptor = self._registry.get(config.model)
        self._retry_strategy = retry_strategy
        self._builder = RequestBuilder(self._registry, base_url=config.base_url)

        extra_headers: dict[str, str] = {}
        if config.organization_id:
            extra_headers['OpenAI-Organization'] = config.organization_id
        if config.project_id:
            extra_headers['OpenAI-Project'] = config.project_id
        self._transport = HttpTransport(
            config.api_key,
            timeout=config.timeout,
            extra_headers=extra_headers,
            client=http_client,
        )

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def __aenter__(self) -> ChatClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Model selection
    # ------------------------------------------------------------------

    @property
    def current_model(self) -> ModelDescriptor:
        return self._model

    def set_model(self, model_id: str) -> None:
        """Switch the default model. Raises `ModelNotSupportedError` if unknown."""
        self._model = self._registry.get(model_id)

    def available_models(self) -> list[str]:
        return self._registry.available_models()

    def _resolve_model_id(self, options: GenerationOptions) -> str:
        return options.model_override or self._model.qualified_id

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def chat(self, text: str, options: GenerationOptions | None = None) -> str:
        """Send a single user message and return the reply text."""
        return await self.chat_with_history([ChatMessage.user(text)], options)

    async def chat_with_history(
        self,
        messages: Sequence[ChatMessage],
        options: GenerationOptions | None = None,
    ) -> str:
        """Send a whole conversation and return the reply text."""
        document = await self.chat_completion(messages, options)
        return extract_content(document)

    async def chat_completion(
        self,
        messages: Sequence[ChatMessage],
        options: GenerationOptions | None = None,
    ) -> dict[str, Any]:
        """Return the provider's raw response document.

        With ``options.stream`` set the undecoded event stream is returned
        as ``{"stream": <text>}``.
        """
        options = options or GenerationOptions()
        request = self._builder.build(self._resolve_model_id(options), messages, options)

        async def _call() -> dict[str, Any]:
            result = await self._transport.send(request.endpoint, request.to_json(), want_stream=request.stream)
            if isinstance(result, StreamHandle):
                async with result:
                    return {'stream': await result.read_text()}
            return result

        if self._retry_strategy is not None and not request.stream:
            return await with_retry(self._retry_strategy)(_call)()
        return await _call()

    async def stream_events(
        self,
        messages: Sequence[ChatMessage],
        options: GenerationOptions | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Yield `StreamEvent`s of a streaming completion.

        The last event has ``is_final=True``. Closing the iterator early
        releases the open response.

        Raises
        ------
        StreamingUnsupportedError
            If the selected model cannot stream.

        """
        options = (options or GenerationOptions()).model_copy(update={'stream': True})
        request = self._builder.build(self._resolve_model_id(options), messages, options)

        handle = cast('StreamHandle', await self._transport.send(request.endpoint, request.to_json(), want_stream=True))
        async with handle, contextlib.aclosing(handle.iter_chunks()) as chunks:
            async with contextlib.aclosing(decode_stream(chunks)) as events:
                async for event in events:
                    yield event

    async def chat_stream(
        self,
        messages: Sequence[ChatMessage],
        callback: StreamCallback,
        options: GenerationOptions | None = None,
    ) -> None:
        """Push deltas to *callback* as ``callback(delta_text, is_final)``.

        *callback* is invoked zero or more times with ``is_final=False``
        followed by exactly one call with ``is_final=True``. It may be a
        plain function or return an awaitable.
        """
        async with contextlib.aclosing(self.stream_events(messages, options)) as events:
            async for event in events:
                result = callback(event.delta_text, event.is_final)
                if inspect.isawaitable(result):
                    await result

    async def predict_structured(
        self,
        records: Sequence[OHLCVRecord],
        instructions: str | None = None,
        expected_count: int = 1,
        options: GenerationOptions | None = None,
    ) -> list[OHLCVRecord]:
        """Ask the model for *expected_count* future candles and validate them.

        Raises
        ------
        ConfigError
            *expected_count* outside 1..50.
        ParseError
            The reply is not an array of exactly *expected_count* valid candles.

        """
        validate_count(expected_count)
        messages = build_prediction_messages(records, instructions, expected_count)

        options = options or GenerationOptions()
        model = self._registry.get(self._resolve_model_id(options))
        requested = options.max_tokens or model.default_max_tokens
        options = options.model_copy(
            update={
                'max_tokens': max(requested, estimated_max_tokens(expected_count)),
                'temperature': PREDICTION_TEMPERATURE if options.temperature is None else options.temperature,
                'system_prompt': None,
                'stream': False,
            }
        )
        content = await self.chat_with_history(messages, options)
        return parse_ohlcv(content, expected_count)

    async def analyze_ohlcv(
        self,
        records: Sequence[OHLCVRecord],
        analysis_type: str | AnalysisType = AnalysisType.comprehensive,
        message: str | None = None,
        *,
        structured: bool = False,
        options: GenerationOptions | None = None,
    ) -> str | OHLCVAnalysis:
        """Ask the model to analyse *records*.

        Parameters
        ----------
        analysis_type
            ``trend``, ``volume``, ``technical`` or ``comprehensive``. Only
            the free-text form uses it as the analysis focus.
        message
            Optional question appended to the user turn.
        structured
            Return an `OHLCVAnalysis` parsed from a JSON reply instead of
            the reply text.

        Raises
        ------
        ConfigError
            Unknown *analysis_type*.
        ParseError
            *structured* is set and the reply is not a valid analysis object.

        """
        analysis_type = resolve_analysis_type(analysis_type)
        if structured:
            messages = build_structured_analysis_messages(records, message)
            defaults = STRUCTURED_ANALYSIS_DEFAULTS
        else:
            messages = build_analysis_messages(records, analysis_type, message)
            defaults = ANALYSIS_DEFAULTS

        options = options or GenerationOptions()
        update: dict[str, Any] = {'system_prompt': None, 'stream': False}
        update.update({name: value for name, value in defaults.items() if getattr(options, name) is None})
        content = await self.chat_with_history(messages, options.model_copy(update=update))
        return parse_analysis(content) if structured else content

    async def batch_chat(
        self,
        conversations: Sequence[Sequence[ChatMessage]],
        options: GenerationOptions | None = None,
    ) -> list[str]:
        """Run conversations one after another; the first failure aborts the batch."""
        return [await self.chat_with_history(messages, options) for messages in conversations]

    async def test_connection(self) -> ConnectionCheck:
        """Send a short test message. Failures are reported in the result, not raised."""
        model = self._model.qualified_id
        try:
            reply = await self.chat(CONNECTION_CHECK_PROMPT)
        except ChatWireError as exc:
            logger.info('connection check for %s failed: %s', model, exc)
            return ConnectionCheck(ok=False, model=model, detail=str(exc))
        return ConnectionCheck(ok=True, model=model, detail=reply)

    # ------------------------------------------------------------------
    # Helper - string representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f'<{self.__class__.__name__} model={self._model.qualified_id!r}>'
