"""wire.request_builder

Turns role-tagged messages plus `GenerationOptions` into the JSON body of a
model's wire format, with one builder function per `WireFormat`.

Pure transform: identical inputs always serialise to byte-identical bodies.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from chatwire.core.exceptions import StreamingUnsupportedError
from chatwire.core.types import ChatMessage, GenerationOptions
from chatwire.registry.descriptor import WireFormat

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from chatwire.registry.descriptor import ModelDescriptor
    from chatwire.registry.model_registry import ModelRegistry

    _Builder = Callable[[ModelDescriptor, Sequence[ChatMessage], GenerationOptions], dict[str, Any]]

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7

# Generic-envelope fields copied from options only when set.
_OPTIONAL_GENERIC_FIELDS: tuple[str, ...] = (
    'top_p',
    'frequency_penalty',
    'presence_penalty',
    'stop',
    'logprobs',
    'top_logprobs',
)


class WireRequest(BaseModel):
    """Provider-specific request: where to POST and what to send."""

    endpoint: str
    body: dict[str, Any]
    stream: bool = False

    model_config = ConfigDict(frozen=True)

    def to_json(self) -> bytes:
        """Canonical UTF-8 JSON encoding of `body`."""
        return json.dumps(self.body, ensure_ascii=False, separators=(',', ':')).encode('utf-8')


# ---------------------------------------------------------------------------
# Per-format builders
# ---------------------------------------------------------------------------


def _materialise(messages: Sequence[ChatMessage], options: GenerationOptions) -> list[dict[str, str]]:
    wire = [m.to_wire() for m in messages]
    if options.system_prompt is not None:
        wire.insert(0, ChatMessage.system(options.system_prompt).to_wire())
    return wire


def _common(descriptor: ModelDescriptor, options: GenerationOptions) -> tuple[float, int]:
    temperature = DEFAULT_TEMPERATURE if options.temperature is None else options.temperature
    max_tokens = descriptor.default_max_tokens if options.max_tokens is None else options.max_tokens
    return temperature, max_tokens


def _build_generic(
    descriptor: ModelDescriptor,
    messages: Sequence[ChatMessage],
    options: GenerationOptions,
) -> dict[str, Any]:
    temperature, max_tokens = _common(descriptor, options)
    body: dict[str, Any] = {
        'model': descriptor.id,
        'messages': _materialise(messages, options),
        'temperature': temperature,
        'max_tokens': max_tokens,
        'stream': options.stream,
    }
    for field in _OPTIONAL_GENERIC_FIELDS:
        value = getattr(options, field)
        if value is not None:
            body[field] = list(value) if isinstance(value, tuple) else value
    return body


def _build_native(
    descriptor: ModelDescriptor,
    messages: Sequence[ChatMessage],
    options: GenerationOptions,
) -> dict[str, Any]:
    if options.stream:
        raise StreamingUnsupportedError(f'Streaming is not available for the native envelope of {descriptor.id}')
    temperature, max_tokens = _common(descriptor, options)
    return {
        'model': descriptor.id,
        'input': {'messages': _materialise(messages, options)},
        'parameters': {
            'temperature': temperature,
            'max_tokens': max_tokens,
            'result_format': 'message',
        },
    }


_BUILDERS: dict[WireFormat, _Builder] = {
    WireFormat.generic_chat: _build_generic,
    WireFormat.native: _build_native,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_request(
    descriptor: ModelDescriptor,
    messages: Sequence[ChatMessage],
    options: GenerationOptions | None = None,
    *,
    base_url: str | None = None,
) -> WireRequest:
    """Build the wire request for *descriptor*.

    Raises
    ------
    StreamingUnsupportedError
        If ``options.stream`` is set and the model cannot stream. No body is built.

    """
    options = options or GenerationOptions()
    if options.stream and not descriptor.supports_streaming:
        raise StreamingUnsupportedError(f'Model {descriptor.qualified_id} does not support streaming')
    body = _BUILDERS[descriptor.wire_format](descriptor, messages, options)
    return WireRequest(endpoint=descriptor.endpoint_for(base_url), body=body, stream=options.stream)


class RequestBuilder:
    """Registry-aware front for `build_request`.

    Holds no mutable state, so one instance is safely shared by concurrent calls.
    """

    def __init__(self, registry: ModelRegistry, *, base_url: str | None = None) -> None:
        self._registry = registry
        self._base_url = base_url

    def build(
        self,
        model_id: str,
        messages: Sequence[ChatMessage],
        options: GenerationOptions | None = None,
    ) -> WireRequest:
        """Resolve *model_id* and build its request.

        Raises
        ------
        ModelNotSupportedError
            If *model_id* is unknown to the registry.
        StreamingUnsupportedError
            If streaming was requested for a model that cannot stream.

        """
        descriptor = self._registry.get(model_id)
        request = build_request(descriptor, messages, options, base_url=self._base_url)
        logger.debug(
            'built %s request for %s (stream=%s)', descriptor.wire_format, descriptor.qualified_id, request.stream
        )
        return request
