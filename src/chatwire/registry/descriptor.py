"""registry.descriptor

Read-only model catalog entries.
"""

from __future__ import annotations

from enum import StrEnum
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field


class WireFormat(StrEnum):
    """JSON shape of request and response bodies for a model."""

    generic_chat = 'generic_chat'  # OpenAI-style /chat/completions
    native = 'native'  # DashScope text-generation: {input: {messages}, parameters: {...}}


class ModelDescriptor(BaseModel):
    """Static description of one model: endpoint, wire format and limits."""

    id: str = Field(..., description='model name sent in the request body')
    provider: str
    display_name: str = ''
    description: str | None = None
    endpoint: str
    wire_format: WireFormat = WireFormat.generic_chat
    max_tokens: int | None = Field(None, ge=1, description='Upper bound for completion tokens')
    context_length: int | None = Field(None, ge=1)
    default_max_tokens: int = Field(2000, ge=1, description='Used when the caller leaves max_tokens unset')
    capabilities: tuple[str, ...] = ()
    is_free_tier: bool = False
    supports_streaming: bool = True
    supports_function_calling: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def qualified_id(self) -> str:
        return f'{self.provider}:{self.id}'

    @property
    def can_stream(self) -> bool:
        """Streaming needs both the capability flag and a streamable envelope."""
        return self.supports_streaming and self.wire_format is WireFormat.generic_chat

    def endpoint_for(self, base_url: str | None) -> str:
        """Return the endpoint with scheme and host replaced by *base_url*."""
        if not base_url:
            return self.endpoint
        base = urlsplit(base_url.rstrip('/'))
        path = urlsplit(self.endpoint).path
        if base.path and not path.startswith(base.path):
            path = base.path + path
        return urlunsplit((base.scheme, base.netloc, path, '', ''))
